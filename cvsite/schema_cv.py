"""
Canonical CV schema (JSON-Resume flavoured, camelCase on the wire).

Every section entry may carry an `i18n` map of per-locale partial overlays;
`with_i18n` derives the overlay model from the entry model so an overlay can
only name fields the entry itself has.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Optional, Type
from urllib.parse import urlsplit

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    create_model,
)
from pydantic.alias_generators import to_camel
from pydantic.fields import FieldInfo

_DATE = r"^\d{4}-\d{2}-\d{2}$"
_EMAIL = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _check_url(v: str) -> str:
    parts = urlsplit(v)
    if not parts.scheme or not parts.netloc:
        raise ValueError("Invalid URL")
    return v


Url = Annotated[str, AfterValidator(_check_url)]
Date = Annotated[str, StringConstraints(pattern=_DATE)]


@dataclass(frozen=True)
class Violation:
    path: str
    message: str

    def __str__(self) -> str:
        return f"[{self.path}]: {self.message}"


class DocumentValidationError(ValueError):
    def __init__(self, violations: List[Violation], source: str = "CV"):
        self.violations = violations
        super().__init__(f"{source} failed validation: " + "; ".join(map(str, violations)))


class _Node(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _omittable(field: FieldInfo) -> tuple:
    # same type and constraints, but may be left out
    annotation = field.annotation
    if field.metadata:
        annotation = Annotated[(annotation, *field.metadata)]
    return annotation, Field(default=None)


def with_i18n(model: Type[_Node]) -> Type[_Node]:
    """`model` plus an optional `i18n: {locale: <omittable-fields copy of model>}`."""
    overlay = create_model(
        f"{model.__name__}Overlay",
        __config__=ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid"),
        **{name: _omittable(field) for name, field in model.model_fields.items()},
    )
    return create_model(
        model.__name__.lstrip("_"),
        __base__=model,
        i18n=(Optional[Dict[str, overlay]], Field(default=None, alias="i18n")),
    )


# ───────────────────────────────────────── sub-schemas ──
class Location(_Node):
    city: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None


class Profile(_Node):
    network: str
    username: str
    url: Optional[Url] = None
    icon: Optional[str] = None


# ───────────────────────────────────────── sections ──
class _Basics(_Node):
    name: str
    label: str
    image: Optional[str] = None
    email: str = Field(pattern=_EMAIL)
    phone: Optional[str] = None
    url: Optional[Url] = None
    summary: Optional[str] = None
    location: Optional[Location] = None
    profiles: Optional[List[Profile]] = None


class _Work(_Node):
    name: str
    position: str
    url: Optional[Url] = None
    start_date: Date
    end_date: Optional[Date] = None  # null → "Present"
    summary: Optional[str] = None
    highlights: Optional[List[str]] = None


class _Education(_Node):
    institution: str
    url: Optional[Url] = None
    area: str
    study_type: str
    start_date: str
    end_date: Optional[str] = None
    score: Optional[str] = None
    courses: Optional[List[str]] = None


class _Skill(_Node):
    name: str
    level: Optional[str] = None
    keywords: List[str]


class _Project(_Node):
    name: str
    is_active: bool = True
    description: str
    highlights: Optional[List[str]] = None
    url: Optional[Url] = None
    github: Optional[Url] = None
    roles: Optional[List[str]] = None
    entity: Optional[str] = None
    keywords: Optional[List[str]] = None


class _Language(_Node):
    language: str
    fluency: str


Basics = with_i18n(_Basics)
Work = with_i18n(_Work)
Education = with_i18n(_Education)
Skill = with_i18n(_Skill)
Project = with_i18n(_Project)
Language = with_i18n(_Language)


class Meta(_Node):
    version: str = "1.0.0"
    last_modified: Optional[str] = None


class CV(_Node):
    basics: Basics
    work: Optional[List[Work]] = None
    education: Optional[List[Education]] = None
    projects: Optional[List[Project]] = None
    skills: Optional[List[Skill]] = None
    languages: Optional[List[Language]] = None
    meta: Optional[Meta] = None


# ───────────────────────────────────────── validation ──
def _violations(exc: ValidationError) -> List[Violation]:
    return [
        Violation(" > ".join(str(p) for p in err["loc"]) or "<root>", err["msg"])
        for err in exc.errors()
    ]


def validate_cv(raw: Any, source: str = "CV") -> Dict[str, Any]:
    """
    Validate `raw` and return it as a plain camelCase tree.

    Fields absent from the input stay absent in the output (defaults are
    not materialised), so overlays keep only the fields they translate.
    Raises DocumentValidationError listing every violation.
    """
    try:
        cv = CV.model_validate(raw)
    except ValidationError as exc:
        raise DocumentValidationError(_violations(exc), source) from exc
    return cv.model_dump(mode="json", by_alias=True, exclude_unset=True)
