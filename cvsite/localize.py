"""
Per-locale translation overlays.

Any object in a CV may carry an `i18n` map: locale code → partial copy of
that object holding only the fields that differ in the locale. Untranslated
fields are the default locale.

• check_locales – configured locales that no overlay provides (advisory).
• resolve       – apply one locale's overlays everywhere and drop the maps.
"""
from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from cvsite.walker import Descend, Path, rewrite

TRANSLATIONS_KEY = "i18n"


@dataclass(frozen=True)
class MissingLocale:
    locale: str

    @property
    def message(self) -> str:
        return f"Locale '{self.locale}' is configured but has no translations in the CV data"


# ───────────────────────────────────────── checker ──
def _overlay_locales(document: Any) -> List[str]:
    if not isinstance(document, Mapping):
        return []
    basics = document.get("basics")
    if not isinstance(basics, Mapping):
        return []
    translations = basics.get(TRANSLATIONS_KEY)
    if not isinstance(translations, Mapping):
        return []
    return [str(code) for code in translations]


def available_locales(document: Any, default_locale: str) -> List[str]:
    """Default locale first, then every locale the `basics` overlays provide."""
    out = [default_locale]
    for code in _overlay_locales(document):
        if code not in out:
            out.append(code)
    return out


def check_locales(
    document: Any, configured_locales: Iterable[str], default_locale: str
) -> List[MissingLocale]:
    """
    Report configured locales the document cannot serve.

    Only `basics` is inspected: it stands in for the whole document, other
    sections may be translated partially.
    """
    available = set(available_locales(document, default_locale))
    missing: List[MissingLocale] = []
    seen = set()
    for code in configured_locales:
        if code in available or code in seen:
            continue
        seen.add(code)
        missing.append(MissingLocale(code))
    return missing


# ───────────────────────────────────────── resolver ──
def resolve(document: Any, locale: str) -> Any:
    """Return a new tree with `locale` overlays applied and no `i18n` left."""

    def overlay(node: Dict[str, Any], path: Path, descend: Descend) -> Dict[str, Any]:
        translations = node.pop(TRANSLATIONS_KEY, None)
        if isinstance(translations, Mapping):
            if isinstance(patch := translations.get(locale), Mapping):
                node.update(patch)
                # an overlay may itself carry a map; it never reaches the output
                node.pop(TRANSLATIONS_KEY, None)
        return {key: descend(value, key) for key, value in node.items()}

    return rewrite(document, overlay)
