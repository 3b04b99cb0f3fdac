"""
Configuration for cvsite.

Settings live in a YAML (or JSON) file, `portfolio.yaml` by default.
Its location and the CV content directory can be overridden from the
environment or a `.env` file:

    CVSITE_CONFIG=path/to/portfolio.yaml
    CVSITE_CONTENT_DIR=content/cv
"""

from __future__ import annotations
from dotenv import load_dotenv
load_dotenv()          # ← must be before os.getenv(...)
import logging, os, re
from pathlib import Path
from typing import List
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "portfolio.yaml"
DEFAULT_CONTENT_DIR = "content/cv"

LOCALE_PATTERN = r"^[a-z]{2,3}(-[A-Z]{2,4})?$"


class ConfigError(ValueError):
    """Config file missing, unreadable or invalid."""


class _Section(BaseModel):
    # camelCase keys in the file, snake_case in code; unknown keys ignored
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SiteConfig(_Section):
    title: str = Field(min_length=1)
    description: str = ""
    url: str
    author: str = ""

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("Must be a valid URL (https://...)")
        return v


class DataConfig(_Section):
    cv_file: str = "me"


class RoutingConfig(_Section):
    prefix_default_locale: bool = False


class I18nConfig(_Section):
    default_locale: str = "es"
    locales: List[str] = Field(min_length=1)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)

    @field_validator("locales")
    @classmethod
    def _locale_codes(cls, v: List[str]) -> List[str]:
        bad = [code for code in v if not re.match(LOCALE_PATTERN, code)]
        if bad:
            raise ValueError(f"Must be valid ISO codes (e.g. 'en', 'es-ES', 'fr'), got {bad}")
        return v

    @model_validator(mode="after")
    def _default_is_configured(self) -> "I18nConfig":
        if self.default_locale not in self.locales:
            raise ValueError(
                f"defaultLocale '{self.default_locale}' must be one of locales {self.locales}"
            )
        return self


class SecurityConfig(_Section):
    restrict_external_scripts: bool = True
    allowed_images_domains: List[str] = Field(default_factory=list)

    @field_validator("allowed_images_domains")
    @classmethod
    def _lower_hosts(cls, v: List[str]) -> List[str]:
        return [h.strip().lower() for h in v if h.strip()]


class FeaturesConfig(_Section):
    security: SecurityConfig = Field(default_factory=SecurityConfig)


class PortfolioConfig(_Section):
    site: SiteConfig
    data: DataConfig = Field(default_factory=DataConfig)
    i18n: I18nConfig = Field(alias="i18n")
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)


# ───────────────────────────────────────── loading ──
def config_path() -> Path:
    return Path(os.getenv("CVSITE_CONFIG", DEFAULT_CONFIG_PATH))


def content_dir() -> Path:
    return Path(os.getenv("CVSITE_CONTENT_DIR", DEFAULT_CONTENT_DIR))


def _describe(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]


def parse_config(raw: dict, source: str = "<memory>") -> PortfolioConfig:
    """Validate an already-loaded mapping; raise ConfigError listing every problem."""
    try:
        return PortfolioConfig.model_validate(raw)
    except ValidationError as exc:
        problems = _describe(exc)
        logger.error("Invalid configuration in %s:\n  %s", source, "\n  ".join(problems))
        raise ConfigError(
            f"Critical error in {source}: " + "; ".join(problems)
        ) from exc


def load_config(path: str | Path | None = None) -> PortfolioConfig:
    path = Path(path) if path else config_path()
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        logger.error("Config file not found: %s", path)
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        logger.error("Config file %s is not valid YAML: %s", path, exc)
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return parse_config(raw, source=str(path))
