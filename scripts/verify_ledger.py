#!/usr/bin/env python3
"""
Ledger 무결성 검증

시산표(차변 합계 == 대변 합계)와 재무상태표(자산 == 부채 + 자본)를
as-of 기준으로 계산하여 결과를 로그로 남긴다.

사용법:
    python -m scripts.verify_ledger
    python -m scripts.verify_ledger --db data/ledger.db --as-of 2026-03-31

종료 코드:
    0: 균형
    1: 불균형 또는 오류
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import ConfigLoadError, load_config
from core.ledger.accounts import ChartOfAccounts
from core.ledger.errors import LedgerError
from core.ledger.reports import ReportEngine
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.logging import setup_logging

logger = logging.getLogger("scripts.verify_ledger")


async def verify(
    config_path: Path | None = None,
    db_path: Path | None = None,
    as_of: date | None = None,
) -> int:
    """검증 실행

    Returns:
        종료 코드 (0: 균형, 1: 불균형 또는 오류)
    """
    try:
        config = load_config(config_path)
    except ConfigLoadError as e:
        logger.error(f"설정 로드 실패: {e}")
        return 1

    db_path = db_path or config.db_path
    as_of = as_of or date.today()
    logger.info(f"Ledger 검증 시작: {db_path} (as of {as_of})")

    try:
        async with SQLiteAdapter(db_path) as db:
            await init_ledger_schema(db)
            chart = await ChartOfAccounts.load(db)
            store = LedgerStore(db, scale=config.ledger.precision)
            reports = ReportEngine(store, chart, config.ledger)

            entry_count = await store.count()
            trial_balance = await reports.trial_balance(as_of)
            balance_sheet = await reports.balance_sheet(as_of)
    except LedgerError as e:
        logger.error(f"Ledger 조회 실패: {e}")
        return 1

    logger.info(f"  - entries: {entry_count}")
    logger.info(
        f"  - 시산표: debit={trial_balance.total_debit} "
        f"credit={trial_balance.total_credit}"
    )
    logger.info(
        f"  - 재무상태표: assets={balance_sheet.total_assets} "
        f"liabilities={balance_sheet.total_liabilities} "
        f"equity={balance_sheet.total_equity} "
        f"(provisional {balance_sheet.provisional_profit})"
    )

    if trial_balance.is_balanced and balance_sheet.is_balanced:
        logger.info("[OK] Ledger 균형")
        return 0

    if not trial_balance.is_balanced:
        logger.error("[FAIL] 시산표 불균형")
    if not balance_sheet.is_balanced:
        logger.error(f"[FAIL] 재무상태표 잔차: {balance_sheet.residual}")
    return 1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ledger 무결성 검증")
    parser.add_argument("--config", type=Path, default=None, help="ledger.yaml 경로")
    parser.add_argument("--db", type=Path, default=None, help="DB 경로 (설정 파일 값 대신 사용)")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="기준일 YYYY-MM-DD (기본: 오늘)",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    setup_logging("verify_ledger")
    exit_code = asyncio.run(verify(args.config, args.db, args.as_of))
    sys.exit(exit_code)
