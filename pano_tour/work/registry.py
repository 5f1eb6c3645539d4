from __future__ import annotations

import dataclasses
import threading
from typing import Callable, Dict, List, Optional

from pano_tour.work.models import Job


class JobRegistry:
    """
    In-memory map of job id -> Job.

    Each job is written only by the task that owns it; any number of pollers
    may read. get() hands out copies so a reader never sees a half-applied
    update. Nothing here is persisted: a restart forgets every job.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, job_id: str, original_file_name: str) -> Job:
        with self._lock:
            if job_id in self._jobs:
                raise KeyError(f"job already exists: {job_id}")
            job = Job(id=job_id, original_file_name=original_file_name)
            self._jobs[job_id] = job
            return dataclasses.replace(job)

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            return dataclasses.replace(job) if job is not None else None

    def update(self, job_id: str, mutator: Callable[[Job], None]) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            mutator(job)
            return dataclasses.replace(job)

    def remove(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def unfinished(self) -> List[str]:
        with self._lock:
            return [job_id for job_id, job in self._jobs.items() if not job.finished]
