from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from pano_tour.web.deps import get_pipeline
from pano_tour.work.jobs import IngestionPipeline

router = APIRouter()


@router.get("/status/{job_id}")
def status(job_id: str, pipeline: IngestionPipeline = Depends(get_pipeline)):
    job = pipeline.get_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="job not found")
    return job
