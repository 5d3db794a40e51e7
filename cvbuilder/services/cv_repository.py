"""Storage of CVs served by the HTTP API."""

import math
import re
import secrets
import threading
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from cvbuilder.config import get_settings
from cvbuilder.models.cv_models import CVContent, StoredCV, utcnow

# 24 hex characters, the shape of the ids clients already hold
CV_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

UPDATABLE_FIELDS = set(CVContent.model_fields) | {"template"}


def is_valid_cv_id(cv_id: str) -> bool:
    return bool(CV_ID_PATTERN.match(cv_id))


class CVRepository:
    """
    Thread-safe in-process CV store.

    Concurrent writers are resolved last-write-wins; there is no version
    check. Every save refreshes ``updatedAt``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._items: Dict[str, StoredCV] = {}

    def create(self, user_id: str, cv_data: Dict[str, Any], template: Optional[str] = None) -> Tuple[str, StoredCV]:
        """
        Validate and store a new CV.

        Raises:
            pydantic.ValidationError: If ``cv_data`` does not match the schema
        """
        now = utcnow()
        fields = {k: v for k, v in cv_data.items() if k in CVContent.model_fields}
        stored = StoredCV.model_validate(
            {**fields, "userId": user_id, "template": template or get_settings().default_template, "createdAt": now, "updatedAt": now}
        )
        cv_id = secrets.token_hex(12)
        with self._lock:
            self._items[cv_id] = stored
        logger.info(f"Created CV {cv_id} for user {user_id}")
        return cv_id, stored

    def get(self, cv_id: str) -> Optional[StoredCV]:
        with self._lock:
            return self._items.get(cv_id)

    def update(self, cv_id: str, changes: Dict[str, Any]) -> Optional[StoredCV]:
        """
        Replace the given top-level fields and re-validate the whole CV.

        Returns:
            The updated CV, or None when ``cv_id`` is unknown

        Raises:
            pydantic.ValidationError: If the merged CV is invalid
        """
        with self._lock:
            current = self._items.get(cv_id)
            if current is None:
                return None
            merged = current.model_dump()
            merged.update({k: v for k, v in changes.items() if k in UPDATABLE_FIELDS})
            merged["updatedAt"] = max(utcnow(), current.updatedAt)
            updated = StoredCV.model_validate(merged)
            self._items[cv_id] = updated
        logger.info(f"Updated CV {cv_id}")
        return updated

    def delete(self, cv_id: str) -> bool:
        with self._lock:
            removed = self._items.pop(cv_id, None)
        if removed is not None:
            logger.info(f"Deleted CV {cv_id}")
        return removed is not None

    def list_by_user(self, user_id: str, page: int = 1, limit: int = 10) -> Tuple[List[Tuple[str, StoredCV]], int]:
        """
        A page of the user's CVs, most recently updated first.

        Returns:
            (items, total) where items are (cv_id, cv) pairs
        """
        with self._lock:
            owned = [(cv_id, cv) for cv_id, cv in self._items.items() if cv.userId == user_id]
        owned.sort(key=lambda pair: pair[1].updatedAt, reverse=True)
        start = (page - 1) * limit
        return owned[start:start + limit], len(owned)

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        return math.ceil(total / limit) if limit else 0


# Singleton instance
_repository: Optional[CVRepository] = None


def get_repository() -> CVRepository:
    """
    Get or create the CV repository singleton.

    Returns:
        CVRepository: The repository instance
    """
    global _repository
    if _repository is None:
        _repository = CVRepository()
    return _repository
