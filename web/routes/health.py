"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

API_VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """서버 상태 확인"""
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
    )
