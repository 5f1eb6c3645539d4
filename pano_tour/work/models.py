from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional


JobState = Literal["uploading", "saving", "validating", "converting", "completed", "error"]

TERMINAL_STATES = ("completed", "error")


@dataclass
class Job:
    id: str
    original_file_name: str
    state: JobState = "uploading"
    progress: int = 0
    message: str = ""
    output_path: Optional[str] = None
    error: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass
class PanoramaRecord:
    id: str
    name: str
    created_at: datetime

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "created_at": self.created_at.isoformat()}

    @classmethod
    def from_json(cls, obj: dict) -> "PanoramaRecord":
        return cls(id=str(obj["id"]), name=str(obj["name"]), created_at=datetime.fromisoformat(obj["created_at"]))
