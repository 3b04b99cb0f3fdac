"""
Content stores: where validated CV documents come from.

Stores hand out plain, schema-validated trees; they never localize or
sanitize. Two backends share one interface so the pipeline does not care
whether documents live on disk or in memory.
"""

from __future__ import annotations
import copy, json, logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from cvsite.schema_cv import validate_cv

logger = logging.getLogger(__name__)

SUFFIXES = (".json", ".yaml", ".yml")


class NotFoundError(LookupError):
    """No document is stored under the requested id."""

    def __init__(self, document_id: str, where: str = ""):
        self.document_id = document_id
        msg = f"CV document not found: '{document_id}'"
        super().__init__(f"{msg} (looked in {where})" if where else msg)


def read_document(path: Path) -> Any:
    """Parse a JSON or YAML CV file; no validation."""
    text = path.read_text(encoding="utf-8")
    return json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)


class ContentStore(ABC):
    """Abstract base class for CV document stores."""

    @abstractmethod
    def get(self, document_id: str) -> Dict[str, Any]:
        """Return the validated document or raise NotFoundError."""
        pass


class MemoryContentStore(ContentStore):
    """Documents held in a dict; validated on every read."""

    def __init__(self, documents: Mapping[str, Any] | None = None):
        self._documents: Dict[str, Any] = dict(documents or {})

    def put(self, document_id: str, raw: Any) -> None:
        self._documents[document_id] = raw

    def get(self, document_id: str) -> Dict[str, Any]:
        if document_id not in self._documents:
            raise NotFoundError(document_id, "memory")
        raw = copy.deepcopy(self._documents[document_id])
        return validate_cv(raw, source=f"CV '{document_id}'")


class DirectoryContentStore(ContentStore):
    """`<root>/<id>.json|.yaml|.yml`, first match wins."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, document_id: str) -> Path | None:
        if not document_id or Path(document_id).name != document_id or document_id.startswith("."):
            return None
        for suffix in SUFFIXES:
            if (path := self.root / f"{document_id}{suffix}").is_file():
                return path
        return None

    def get(self, document_id: str) -> Dict[str, Any]:
        path = self.path_for(document_id)
        if path is None:
            raise NotFoundError(document_id, f"{self.root}/{document_id}{{{','.join(SUFFIXES)}}}")
        logger.debug("Loading CV '%s' from %s", document_id, path)
        return validate_cv(read_document(path), source=str(path))
