from fastapi import APIRouter

from app.platform.response import api_response
from app.platform.schemas import HealthOut, utc_timestamp

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check():
    return api_response(data=HealthOut(status="ok", timestamp=utc_timestamp()))
