"""Persistent visit storage for the Compass tracker.

This module keeps the identifiers that must outlive a single launch:
- The date of the very first visit
- The session id issued for the current launch
- The number of recorded visits
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class VisitRecord(BaseModel):
    """Visit data persisted across launches."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    first_visit: datetime = Field(default_factory=datetime.now, description="Date of the first recorded visit")
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1, description="Session id for the current launch")
    visits: int = Field(default=0, ge=0, description="Number of recorded visits")


class VisitStore:
    """File-backed storage for visit identifiers."""

    def __init__(self, storage_dir: Optional[Path] = None):
        """Initialize visit store.

        Args:
            storage_dir: Directory for the visit file (defaults to ~/.compass)
        """
        if storage_dir is None:
            self.storage_dir = Path.home() / ".compass"
        else:
            self.storage_dir = Path(storage_dir)

        self.visits_file = self.storage_dir / "visits.json"
        self._record = self._load()

    @property
    def first_visit_date(self) -> datetime:
        return self._record.first_visit

    @property
    def session_id(self) -> str:
        return self._record.session_id

    @property
    def visits(self) -> int:
        return self._record.visits

    def record_visit(self) -> None:
        """Count a new visit and issue the session id for this launch."""
        self._record.visits += 1
        self._record.session_id = str(uuid.uuid4())
        self._save()
        logger.info(f"Recorded visit {self._record.visits}, session {self._record.session_id}")

    def _load(self) -> VisitRecord:
        """Load the stored record, starting fresh if none is usable."""
        if not self.visits_file.exists():
            logger.debug("No visit file found, starting a new record")
            return VisitRecord()

        try:
            with open(self.visits_file, "r") as f:
                return VisitRecord.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load visit data, starting a new record: {e}")
            return VisitRecord()

    def _save(self) -> bool:
        """Write the record atomically."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            temp_file = self.visits_file.with_suffix(".tmp")

            with open(temp_file, "w") as f:
                f.write(self._record.model_dump_json(indent=2))

            temp_file.replace(self.visits_file)
            return True

        except OSError as e:
            logger.error(f"Failed to store visit data: {e}")
            return False
