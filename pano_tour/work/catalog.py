from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import List

from pano_tour.work.models import PanoramaRecord
from pano_tour.work.storage import catalog_path, job_dir, read_json, write_json

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Durable list of converted panoramas, kept as one JSON file under the root.

    Every mutation reads the whole file, changes the list and writes the whole
    list back (atomic replace). Mutations inside this process are serialized
    by a lock; a second process writing the same file can still lose updates.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return catalog_path(self.root)

    def list_all(self) -> List[PanoramaRecord]:
        if not self.path.exists():
            return []
        return [PanoramaRecord.from_json(x) for x in read_json(self.path)]

    def _save(self, records: List[PanoramaRecord]) -> None:
        write_json(self.path, [r.to_json() for r in records])

    def append(self, record: PanoramaRecord) -> None:
        with self._lock:
            records = self.list_all()
            records.append(record)
            self._save(records)

    def rename(self, panorama_id: str, new_name: str) -> bool:
        with self._lock:
            records = self.list_all()
            for r in records:
                if r.id == panorama_id:
                    r.name = new_name
                    self._save(records)
                    return True
            return False

    def remove(self, panorama_id: str) -> bool:
        with self._lock:
            records = self.list_all()
            remaining = [r for r in records if r.id != panorama_id]
            if len(remaining) == len(records):
                return False
            self._save(remaining)

        pano_dir = job_dir(self.root, panorama_id)
        if pano_dir.exists():
            try:
                shutil.rmtree(pano_dir)
            except OSError:
                logger.exception("failed to delete panorama directory: %s", panorama_id)
        return True
