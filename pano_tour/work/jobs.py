from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, List, Optional

from pano_tour.work.catalog import CatalogStore
from pano_tour.work.errors import ImageValidationError, SubmissionError
from pano_tour.work.krpano import KrpanoTool, progress_for_line
from pano_tour.work.models import Job, JobState, PanoramaRecord
from pano_tour.work.registry import JobRegistry
from pano_tour.work.runner import JobRunner
from pano_tour.work.storage import base_data_dir, job_dir, source_path, utc_now
from pano_tour.work.validator import check_equirectangular

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff")


def max_upload_bytes() -> int:
    return int(os.getenv("PANO_MAX_UPLOAD_MB", "500")) * 1024 * 1024


def display_name(filename: str) -> str:
    return Path(filename.replace("\\", "/")).stem


def check_upload(filename: str, size_bytes: Optional[int], limit: int) -> None:
    if not filename:
        raise SubmissionError("missing filename")
    if size_bytes is not None and size_bytes <= 0:
        raise SubmissionError("empty file")
    if size_bytes is not None and size_bytes > limit:
        raise SubmissionError(f"file too large (limit {limit // (1024 * 1024)}MB)")
    if Path(filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise SubmissionError("unsupported file type (only .jpg/.jpeg/.png/.tif/.tiff)")


class IngestionPipeline:
    """
    Upload -> validate -> makepano -> catalog.

    submit() saves the upload and hands the job to the runner, then returns
    the job id. Everything after that happens on a runner thread, which only
    ever ends the job in `completed` or `error`.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        registry: Optional[JobRegistry] = None,
        catalog: Optional[CatalogStore] = None,
        tool: Optional[KrpanoTool] = None,
        runner: Optional[JobRunner] = None,
        upload_limit: Optional[int] = None,
    ) -> None:
        self.root = root if root is not None else base_data_dir()
        self.registry = registry or JobRegistry()
        self.catalog = catalog or CatalogStore(self.root)
        self.tool = tool or KrpanoTool()
        self.runner = runner or JobRunner()
        self.upload_limit = upload_limit if upload_limit is not None else max_upload_bytes()

    # --------- boundary ----------
    def submit(self, stream: BinaryIO, filename: str, size_bytes: Optional[int]) -> str:
        check_upload(filename, size_bytes, self.upload_limit)

        job_id = uuid.uuid4().hex
        self.registry.create(job_id, filename)
        self._set(job_id, "saving", 10, "saving")

        src = source_path(self.root, job_id, filename)
        try:
            src.parent.mkdir(parents=True, exist_ok=True)
            with src.open("wb") as f:
                shutil.copyfileobj(stream, f)
            written = src.stat().st_size
        except OSError:
            logger.exception("job %s: failed to save upload %s", job_id, filename)
            self._discard(job_id)
            raise

        if written == 0:
            self._discard(job_id)
            raise SubmissionError("empty file")
        if written > self.upload_limit:
            self._discard(job_id)
            raise SubmissionError(f"file too large (limit {self.upload_limit // (1024 * 1024)}MB)")

        logger.info("job %s: saved %s (%d bytes)", job_id, filename, written)
        try:
            self.runner.start(job_id, self.process)
        except RuntimeError:
            logger.exception("job %s: could not be scheduled", job_id)
            self._discard(job_id)
            raise
        return job_id

    def get_status(self, job_id: str) -> Optional[Job]:
        return self.registry.get(job_id)

    def list_catalog(self) -> List[PanoramaRecord]:
        return self.catalog.list_all()

    def rename_catalog_entry(self, panorama_id: str, new_name: str) -> bool:
        name = (new_name or "").strip()
        if not name:
            raise ValueError("name must not be empty")
        return self.catalog.rename(panorama_id, name)

    def delete_catalog_entry(self, panorama_id: str) -> bool:
        removed = self.catalog.remove(panorama_id)
        if removed:
            self.registry.remove(panorama_id)
        return removed

    def shutdown(self) -> None:
        for job_id in self.runner.shutdown():
            self._fail(job_id, "abandoned: server shut down before the job finished")

    # --------- background task ----------
    def process(self, job_id: str) -> None:
        try:
            self._convert(job_id)
        except Exception as e:
            logger.exception("job %s failed", job_id)
            self._fail(job_id, str(e) or e.__class__.__name__)

    def _convert(self, job_id: str) -> None:
        job = self.registry.get(job_id)
        if job is None:
            logger.warning("job %s: vanished before processing", job_id)
            return

        src = source_path(self.root, job_id, job.original_file_name)
        out_dir = job_dir(self.root, job_id)

        self._set(job_id, "validating", 40, "checking image")
        try:
            width = check_equirectangular(src)
        except ImageValidationError as e:
            logger.info("job %s: rejected: %s", job_id, e)
            self._fail(job_id, str(e))
            return

        self._set(job_id, "converting", None, "converting")
        ok = self.tool.convert(job_id, src, out_dir, width, lambda line: self._on_tool_output(job_id, line))
        if not ok:
            self._fail(job_id, "krpano conversion failed")
            return

        completed_at = utc_now()
        record = PanoramaRecord(id=job_id, name=display_name(job.original_file_name), created_at=completed_at)
        try:
            self.catalog.append(record)
        except (OSError, ValueError) as e:
            logger.exception("job %s: catalog update failed", job_id)
            self._fail(job_id, f"catalog update failed: {e}")
            return

        def _complete(j: Job) -> None:
            if j.finished:
                return
            j.state = "completed"
            j.progress = 100
            j.message = "completed"
            j.output_path = str(out_dir)
            j.completed_at = completed_at

        self.registry.update(job_id, _complete)
        logger.info("job %s: completed", job_id)

    def _on_tool_output(self, job_id: str, line: str) -> None:
        self._set(job_id, "converting", progress_for_line(line), f"converting: {line}")

    # --------- registry helpers ----------
    def _set(self, job_id: str, state: JobState, progress: Optional[int], message: str) -> None:
        def _apply(j: Job) -> None:
            if j.finished:
                return
            j.state = state
            if progress is not None:
                j.progress = progress
            j.message = message

        self.registry.update(job_id, _apply)

    def _fail(self, job_id: str, error: str) -> None:
        def _apply(j: Job) -> None:
            if j.finished:
                return
            j.state = "error"
            j.progress = 0
            j.message = "error"
            j.error = error

        self.registry.update(job_id, _apply)

    def _discard(self, job_id: str) -> None:
        self.registry.remove(job_id)
        shutil.rmtree(job_dir(self.root, job_id), ignore_errors=True)
