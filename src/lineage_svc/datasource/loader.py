"""Document loader - loads canned documents from YAML/JSON files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..documents import doc_id
from .types import DataSourceError


logger = logging.getLogger(__name__)


class DocumentLoader:
    """
    Loads documents from YAML or JSON files.

    Either a list of documents:
    ```yaml
    - _id: hc1
      type: health_center
    - _id: c1
      type: person
      parent: {_id: hc1}
    ```

    or a mapping keyed by `_id` (the key fills in a missing `_id`):
    ```yaml
    hc1:
      type: health_center
    c1:
      type: person
      parent: {_id: hc1}
    ```
    """

    def load_file(self, path: str | Path) -> dict[str, dict[str, Any]]:
        """Load documents from a YAML or JSON file."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Documents file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                import json
                data = json.load(f)

        documents = self.load_data(data)
        logger.info(f"Loaded {len(documents)} documents from {path}")
        return documents

    def load_data(self, data: Any) -> dict[str, dict[str, Any]]:
        """Load documents from already-parsed data."""
        if data is None:
            return {}
        if isinstance(data, list):
            return self._load_list(data)
        if isinstance(data, dict):
            return self._load_mapping(data)
        raise DataSourceError(
            f"Documents must be a list or a mapping, got {type(data).__name__}"
        )

    def _load_list(self, items: list[Any]) -> dict[str, dict[str, Any]]:
        documents: dict[str, dict[str, Any]] = {}
        for item in items:
            key = doc_id(item)
            if key is None:
                logger.warning(f"Skipping document without _id: {item!r}")
                continue
            documents[key] = dict(item)
        return documents

    def _load_mapping(self, data: dict[str, Any]) -> dict[str, dict[str, Any]]:
        documents: dict[str, dict[str, Any]] = {}
        for key, item in data.items():
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-mapping document at key '{key}'")
                continue
            doc = {"_id": str(key), **item}
            documents[doc["_id"]] = doc
        return documents


def load_documents(path: str | Path) -> dict[str, dict[str, Any]]:
    """Convenience function to load documents from a file."""
    return DocumentLoader().load_file(path)
