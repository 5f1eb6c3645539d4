from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from pano_tour.web.deps import get_pipeline
from pano_tour.work.errors import SubmissionError
from pano_tour.work.jobs import IngestionPipeline

router = APIRouter()


@router.post("/upload")
async def upload(file: UploadFile = File(...), pipeline: IngestionPipeline = Depends(get_pipeline)):
    if not file.filename:
        raise HTTPException(status_code=400, detail="missing filename")

    try:
        job_id = await run_in_threadpool(pipeline.submit, file.file, file.filename, file.size)
    except SubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"failed to save upload: {e}")
    return {"id": job_id}
