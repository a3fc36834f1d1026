from fastapi import APIRouter

from app.api.routes import assets, utils

api_router = APIRouter()

# Registered first so the catch-all asset routes do not shadow it
api_router.include_router(utils.router)

api_router.include_router(assets.router)
