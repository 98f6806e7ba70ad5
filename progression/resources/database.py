"""
Content Database.

Handles loading and validation of static module content (JSON documents).
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

BUNDLED_SCHEMA_DIR = Path(__file__).parent / "schemas"


class ContentDatabase:
    """
    Central storage for raw module documents.

    Each ``<data_path>/modules/*.json`` file holds one module. Files are
    validated against ``module.schema.json`` and kept in file-name order;
    invalid files are logged and skipped.
    """

    def __init__(self, data_path: Path | str, schema_dir: Optional[Path | str] = None):
        self._data_path = Path(data_path)
        self._schema_dir = Path(schema_dir) if schema_dir is not None else BUNDLED_SCHEMA_DIR
        self._schemas: dict[str, Any] = {}

        # Data stores
        self.modules: dict[str, dict[str, Any]] = {}
        self.invalid_files: list[Path] = []

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> None:
        """Load all content from disk."""
        self._load_schemas()
        self.invalid_files = []

        self.modules = self._load_category("modules", "module.schema.json")

        self.logger.info(
            f"Loaded {len(self.modules)} modules "
            f"({len(self.invalid_files)} invalid files skipped)."
        )

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        if not self._schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {self._schema_dir}")
            return

        for schema_file in sorted(self._schema_dir.glob("*.schema.json")):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files in a category folder, keyed by document id."""
        category_dir = self._data_path / folder
        data_store: dict[str, Any] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                self.invalid_files.append(file_path)
                continue

            if schema is not None:
                try:
                    jsonschema.validate(instance=data, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in {file_path}: {e.message}")
                    self.invalid_files.append(file_path)
                    continue

            if not isinstance(data, dict) or 'id' not in data:
                self.logger.error(f"Document without id in {file_path}")
                self.invalid_files.append(file_path)
                continue

            if data['id'] in data_store:
                self.logger.warning(f"Duplicate id '{data['id']}' in {file_path}; keeping the first")
                continue

            data_store[data['id']] = data

        return data_store

    def get_module(self, module_id: str) -> dict[str, Any] | None:
        return self.modules.get(module_id)

    def module_ids(self) -> list[str]:
        """Loaded module ids in file-name order."""
        return list(self.modules)
