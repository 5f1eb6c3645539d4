from fastapi import Request

from pano_tour.work.jobs import IngestionPipeline


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline
