"""
cvsite – localized, sanitized CV content for static portfolio sites.
"""

from cvsite.localize import check_locales, resolve
from cvsite.pipeline import LocalizedContent, load_localized_content, process_document
from cvsite.sanitizer import BLOCKED, sanitize
from cvsite.store import NotFoundError

__all__ = [
    "BLOCKED",
    "LocalizedContent",
    "NotFoundError",
    "check_locales",
    "load_localized_content",
    "process_document",
    "resolve",
    "sanitize",
]
