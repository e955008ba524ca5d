from fastapi import APIRouter

from querystore.api.routes import queries, utils

api_router = APIRouter()
api_router.include_router(utils.router)
api_router.include_router(queries.router)
