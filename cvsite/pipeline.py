"""
CV document → locale-specific, sanitized tree ready for rendering.

    check_locales  (warn about configured locales nobody translated)
      → resolve    (apply the locale's overlays, drop i18n maps)
      → sanitize   (blank out images from hosts not on the allowlist)

Sanitizing runs after resolving so locale-specific image overrides go
through the same allowlist as the default ones.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cvsite.config import PortfolioConfig, content_dir, load_config
from cvsite.localize import MissingLocale, check_locales, resolve
from cvsite.sanitizer import BlockedReference, sanitize
from cvsite.store import ContentStore, DirectoryContentStore

logger = logging.getLogger(__name__)


@dataclass
class LocalizedContent:
    locale: str
    document: Dict[str, Any]
    missing_locales: List[MissingLocale] = field(default_factory=list)
    blocked: List[BlockedReference] = field(default_factory=list)


def process_document(
    document: Dict[str, Any], config: PortfolioConfig, locale: Optional[str] = None
) -> LocalizedContent:
    i18n = config.i18n
    locale = locale or i18n.default_locale

    missing = check_locales(document, i18n.locales, i18n.default_locale)
    for diag in missing:
        logger.warning("%s", diag.message)

    localized = resolve(document, locale)
    sanitized, blocked = sanitize(localized, config.features.security.allowed_images_domains)
    if blocked:
        logger.info("Removed %d unauthorized image(s) for locale '%s'", len(blocked), locale)
    return LocalizedContent(locale, sanitized, missing, blocked)


def load_localized_content(
    document_id: Optional[str] = None,
    locale: Optional[str] = None,
    *,
    config: Optional[PortfolioConfig] = None,
    store: Optional[ContentStore] = None,
) -> Dict[str, Any]:
    """
    Fetch a CV from the content store and return it localized and sanitized.

    `document_id` defaults to the configured `data.cvFile`, `locale` to the
    configured default locale. NotFoundError from the store propagates.
    """
    config = config or load_config()
    store = store or DirectoryContentStore(content_dir())
    document_id = document_id or config.data.cv_file

    document = store.get(document_id)
    return process_document(document, config, locale).document
