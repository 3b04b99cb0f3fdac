"""
Image allowlist filter.

Fields that look like image references (`image`, `avatar`, `cover`, or any
key containing `img`) holding an absolute URL must point at a host from the
operator's allowlist. Anything else is replaced with `BLOCKED` and reported.
Strings that do not parse as URLs with a host are left alone.
"""
from __future__ import annotations
import logging, re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from cvsite.walker import Descend, Path, format_path, rewrite

logger = logging.getLogger(__name__)

IMAGE_KEYS = frozenset({"image", "avatar", "cover"})
_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
# schemes whose authority browsers parse leniently: any run of / or \ after
# the colon opens it, and \ separates path segments like /
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})
_C0_OR_SPACE = "".join(chr(c) for c in range(0x21))


class _Blocked:
    """Marker left in place of an image removed by policy."""

    _instance: Optional["_Blocked"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BLOCKED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Blocked, ())


BLOCKED = _Blocked()


@dataclass(frozen=True)
class BlockedReference:
    url: str
    path: str = ""


def is_image_key(key: Any) -> bool:
    # substring match, case-sensitive: imgUrl, hero_img, imgAlt all count
    return isinstance(key, str) and (key in IMAGE_KEYS or "img" in key)


def _normalise_url(value: str) -> Optional[str]:
    """
    Rewrite `value` the way a browser reads it, as `scheme://...`, or return
    None when it is not an absolute URL.
    """
    value = value.strip(_C0_OR_SPACE)
    for ch in "\t\n\r":
        value = value.replace(ch, "")
    if not (m := _SCHEME.match(value)):
        return None
    scheme, rest = m.group(1).lower(), value[m.end():]
    if scheme in _SPECIAL_SCHEMES:
        return f"{scheme}://" + rest.lstrip("/\\").replace("\\", "/")
    return value if rest.startswith("//") else None


def url_host(value: str) -> Optional[str]:
    """Host of an absolute URL, or None when `value` is not one."""
    if (url := _normalise_url(value)) is None:
        return None
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def sanitize(document: Any, allowlist: Iterable[str]) -> Tuple[Any, List[BlockedReference]]:
    """
    Return a copy of `document` with disallowed image URLs replaced by
    `BLOCKED`, plus one `BlockedReference` per replaced value.
    """
    allowed = frozenset(h.lower() for h in allowlist)
    blocked: List[BlockedReference] = []

    def filter_images(node: Dict[str, Any], path: Path, descend: Descend) -> Dict[str, Any]:
        for key, value in node.items():
            if is_image_key(key) and isinstance(value, str) and (host := url_host(value)):
                if host not in allowed:
                    ref = BlockedReference(value, format_path(path + (key,)))
                    logger.warning("Blocked unauthorized image at %s: %s", ref.path, value)
                    blocked.append(ref)
                    node[key] = BLOCKED
            else:
                node[key] = descend(value, key)
        return node

    return rewrite(document, filter_images), blocked


def to_plain(document: Any) -> Any:
    """Swap `BLOCKED` markers for None, e.g. before JSON serialisation."""

    def unmark(node: Dict[str, Any], path: Path, descend: Descend) -> Dict[str, Any]:
        return {k: None if v is BLOCKED else descend(v, k) for k, v in node.items()}

    if document is BLOCKED:
        return None
    return rewrite(document, unmark)
