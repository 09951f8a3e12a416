"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.routes import health, ledger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    setup_logging("web")
    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화 (읽기 전용 연결 전에 파일 생성)
    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)
    logger.info(f"Web: ledger DB ready at {settings.db_path}")

    yield


app = FastAPI(
    title="Ledger API",
    description="복식부기 Ledger 보고서 API",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(ledger.router)
