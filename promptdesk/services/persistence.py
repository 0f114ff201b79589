"""
PERSISTENCE ADAPTER MODULE
==========================

Durable snapshot/restore of the three pieces of state, one JSON file per key
in DATA_DIR:

  parameters.json - the ParameterSet
  sessions.json   - every session with its messages (timestamps as ISO-8601)
  templates.json  - the template library

Each record is saved and loaded on its own. A missing file is normal (first
run) and loads as None. A file that can't be parsed or doesn't match the
schema is logged and also loads as None, so the owner falls back to its
defaults; the other records still load. Nothing here raises on bad data.

Writes go to a temporary file that is then moved over the target, so a crash
mid-write never leaves a half-written record. Writes are retried on OSError;
if they still fail the error is logged and the in-memory state stays as is.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from promptdesk.errors import PersistenceCorruptError
from promptdesk.models import ParameterSet, Session, Snapshot, Template
from promptdesk.utils.retry import with_retry

logger = logging.getLogger("PromptDesk")

PARAMETERS_KEY = "parameters"
SESSIONS_KEY = "sessions"
TEMPLATES_KEY = "templates"

_ADAPTERS = {
    PARAMETERS_KEY: TypeAdapter(ParameterSet),
    SESSIONS_KEY: TypeAdapter(List[Session]),
    TEMPLATES_KEY: TypeAdapter(List[Template]),
}


class PersistenceAdapter:
    """Key-value JSON store for the PromptDesk snapshot."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    # --------------------------------------------------------------------------
    # SAVE
    # --------------------------------------------------------------------------

    def save(self, snapshot: Snapshot) -> None:
        """Write every record present on the snapshot."""
        if snapshot.parameters is not None:
            self.save_parameters(snapshot.parameters)
        if snapshot.sessions is not None:
            self.save_sessions(snapshot.sessions)
        if snapshot.templates is not None:
            self.save_templates(snapshot.templates)

    def save_parameters(self, parameters: ParameterSet) -> bool:
        return self._write(PARAMETERS_KEY, parameters)

    def save_sessions(self, sessions: List[Session]) -> bool:
        return self._write(SESSIONS_KEY, sessions)

    def save_templates(self, templates: List[Template]) -> bool:
        return self._write(TEMPLATES_KEY, templates)

    def _write(self, key: str, value: Any) -> bool:
        payload = _ADAPTERS[key].dump_json(value, by_alias=True, indent=2)
        target = self.path_for(key)
        tmp_path = target.with_suffix(f"{target.suffix}.tmp")

        def write_atomically() -> None:
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, target)

        try:
            with_retry(write_atomically)
            return True
        except OSError as e:
            logger.error("Failed to save %s to %s: %s", key, target, e)
            return False

    # --------------------------------------------------------------------------
    # LOAD
    # --------------------------------------------------------------------------

    def load(self) -> Snapshot:
        """Load every record; absent or corrupt ones come back as None."""
        return Snapshot(
            parameters=self.load_parameters(),
            sessions=self.load_sessions(),
            templates=self.load_templates(),
        )

    def load_parameters(self) -> Optional[ParameterSet]:
        return self._read(PARAMETERS_KEY)

    def load_sessions(self) -> Optional[List[Session]]:
        return self._read(SESSIONS_KEY)

    def load_templates(self) -> Optional[List[Template]]:
        return self._read(TEMPLATES_KEY)

    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            return self._parse(key, path)
        except FileNotFoundError:
            return None
        except PersistenceCorruptError as e:
            logger.warning("%s; falling back to defaults", e.message)
            return None

    @staticmethod
    def _parse(key: str, path: Path) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceCorruptError(key, f"unreadable ({e})") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceCorruptError(key, f"invalid JSON ({e.msg})") from e
        try:
            return _ADAPTERS[key].validate_python(data)
        except ValidationError as e:
            raise PersistenceCorruptError(key, f"{e.error_count()} schema error(s)") from e
