from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from pano_tour.web.deps import get_pipeline
from pano_tour.work.jobs import IngestionPipeline

router = APIRouter(prefix="/panoramas")


@router.get("")
def list_panoramas(pipeline: IngestionPipeline = Depends(get_pipeline)):
    return [r.to_json() for r in pipeline.list_catalog()]


@router.put("/{panorama_id}")
def rename(
    panorama_id: str,
    name: Optional[str] = Body(default=None, embed=True),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    if not (name or "").strip():
        raise HTTPException(status_code=400, detail="name must not be empty")
    try:
        renamed = pipeline.rename_catalog_entry(panorama_id, name)
    except (OSError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"catalog update failed: {e}")
    if not renamed:
        raise HTTPException(status_code=404, detail="panorama not found")
    return {"renamed": True}


@router.delete("/{panorama_id}")
def delete(panorama_id: str, pipeline: IngestionPipeline = Depends(get_pipeline)):
    try:
        removed = pipeline.delete_catalog_entry(panorama_id)
    except (OSError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"catalog update failed: {e}")
    if not removed:
        raise HTTPException(status_code=404, detail="panorama not found")
    return {"removed": True}
