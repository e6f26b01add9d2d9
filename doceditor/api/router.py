from fastapi import APIRouter

from doceditor.api.http import auth_router, documents_router, health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(documents_router)
