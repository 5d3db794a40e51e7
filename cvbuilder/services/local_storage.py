"""Durable local storage for CV snapshots and the anonymous client id."""

import json
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from cvbuilder.models.cv_models import CVDocument

CV_DATA_KEY = "growva-cv-data"
USER_ID_KEY = "growva-user-id"


class LocalStorage:
    """
    Key/value store keeping one JSON blob per key under a directory.

    Read and write failures are logged and swallowed: callers keep working
    on their in-memory state and the next write retries.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[Any]:
        """Return the decoded value stored under ``key``, or None."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable snapshot {path}: {e}")
            return None

    def set_item(self, key: str, value: Any) -> bool:
        """Write ``value`` under ``key`` atomically. Returns False on failure."""
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save {key} to {path}: {e}")
            return False
        return True

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove {key}: {e}")

    def load_cv(self) -> Optional[CVDocument]:
        """
        Load the saved CV snapshot.

        Returns:
            CVDocument or None when the snapshot is missing or corrupt
        """
        data = self.get_item(CV_DATA_KEY)
        if data is None:
            return None
        try:
            return CVDocument.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid CV snapshot: {e.error_count()} validation error(s)")
            return None

    def save_cv(self, document: CVDocument) -> bool:
        saved = self.set_item(CV_DATA_KEY, document.model_dump(mode="json"))
        if saved:
            logger.debug(f"Saved CV snapshot {document.id}")
        return saved

    def clear_cv(self) -> None:
        self.remove_item(CV_DATA_KEY)

    def get_or_create_user_id(self) -> str:
        """
        Return the anonymous id identifying this client to the remote API.

        A random id is generated and persisted on first use.
        """
        stored = self.get_item(USER_ID_KEY)
        if isinstance(stored, str) and stored:
            return stored
        user_id = f"user_{uuid.uuid4().hex}"
        self.set_item(USER_ID_KEY, user_id)
        return user_id
