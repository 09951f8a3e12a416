"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.accounts import ChartOfAccounts
from core.ledger.reports import ReportEngine
from core.ledger.store import LedgerStore


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    Web은 보고서 조회만 수행.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


def get_ledger_store(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> LedgerStore:
    """요청 단위 LedgerStore"""
    return LedgerStore(db, scale=settings.ledger.precision)


async def get_chart(db: SQLiteAdapter = Depends(get_db)) -> ChartOfAccounts:
    """DB의 계정과목표"""
    return await ChartOfAccounts.load(db)


def get_report_engine(
    store: LedgerStore = Depends(get_ledger_store),
    chart: ChartOfAccounts = Depends(get_chart),
    settings: Settings = Depends(get_app_settings),
) -> ReportEngine:
    return ReportEngine(store, chart, settings.ledger)
