from fastapi import APIRouter

from app.domains.scheduling.api import routes as scheduling

api_router = APIRouter()

# API routes (all have the API_V1_STR prefix from the app factory)
api_router.include_router(scheduling.router)
