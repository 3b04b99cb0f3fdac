"""
Content-Security-Policy for the generated site.

Static pages cannot set response headers, so the policy is injected as a
<meta http-equiv> tag into the rendered HTML.
"""
from __future__ import annotations
import logging
from jinja2 import Environment

from cvsite.config import SecurityConfig

logger = logging.getLogger(__name__)

env = Environment(autoescape=True)
_META = env.from_string('<meta http-equiv="Content-Security-Policy" content="{{ csp }}">')


def build_csp(security: SecurityConfig) -> str:
    img_src = " ".join(["'self'", "data:", *security.allowed_images_domains])
    script_src = "'self' 'unsafe-inline'"
    if not security.restrict_external_scripts:
        script_src += " *"
    return "; ".join([
        "default-src 'self'",
        f"img-src {img_src}",
        f"script-src {script_src}",
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        "font-src 'self' https://fonts.gstatic.com",
        "connect-src 'self'",
        "object-src 'none'",
        "base-uri 'self'",
    ])


def inject_csp(html: str, security: SecurityConfig) -> str:
    """Insert the policy <meta> right after the first <head>."""
    if "<head>" not in html:
        logger.debug("No <head> tag found; CSP meta not injected")
        return html
    meta = _META.render(csp=build_csp(security))
    return html.replace("<head>", f"<head>{meta}", 1)
