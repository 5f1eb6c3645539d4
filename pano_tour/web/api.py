from fastapi import APIRouter

from pano_tour.web.routes.panoramas import router as panoramas_router
from pano_tour.web.routes.status import router as status_router
from pano_tour.web.routes.upload import router as upload_router

api_router = APIRouter()
api_router.include_router(upload_router)
api_router.include_router(status_router)
api_router.include_router(panoramas_router)
