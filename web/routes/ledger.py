"""
복식부기 보고서 API 라우트

General Ledger, 시산표, 재무상태표, 손익계산서, 거래별 entry, 미결제 잔액 조회.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from core.ledger.errors import InvalidAccount, InvalidScale
from core.ledger.money import Money
from core.ledger.reports import ReportEngine
from core.ledger.store import LedgerStore
from web.dependencies import get_ledger_store, get_report_engine
from web.models.responses import (
    BalanceSheetResponse,
    EntryResponse,
    GeneralLedgerResponse,
    OutstandingResponse,
    ProfitAndLossResponse,
    TrialBalanceResponse,
)

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("/general-ledger/{account}", response_model=GeneralLedgerResponse)
async def get_general_ledger(
    account: str,
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    include_reverted: bool = Query(default=False),
    reports: ReportEngine = Depends(get_report_engine),
):
    """계정 원장 (그룹 계정이면 하위 계정 전체)"""
    try:
        report = await reports.general_ledger(account, from_date, to_date, include_reverted)
    except InvalidAccount as e:
        raise HTTPException(status_code=404, detail=str(e))
    return GeneralLedgerResponse.from_report(report)


@router.get("/trial-balance", response_model=TrialBalanceResponse)
async def get_trial_balance(
    as_of: date | None = Query(default=None),
    include_zero: bool = Query(default=False),
    reports: ReportEngine = Depends(get_report_engine),
):
    """시산표 조회

    잔액이 0인 계정은 include_zero가 아니면 제외.
    """
    report = await reports.trial_balance(as_of or date.today(), include_zero)
    return TrialBalanceResponse.from_report(report)


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    as_of: date | None = Query(default=None),
    level: int | None = Query(default=None, ge=0),
    reports: ReportEngine = Depends(get_report_engine),
):
    """재무상태표"""
    report = await reports.balance_sheet(as_of or date.today(), level)
    return BalanceSheetResponse.from_report(report)


@router.get("/profit-and-loss", response_model=ProfitAndLossResponse)
async def get_profit_and_loss(
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    level: int | None = Query(default=None, ge=0),
    reports: ReportEngine = Depends(get_report_engine),
):
    """손익계산서"""
    report = await reports.profit_and_loss(from_date, to_date, level)
    return ProfitAndLossResponse.from_report(report)


@router.get("/entries/{reference_type}/{reference_name}", response_model=list[EntryResponse])
async def get_entries(
    reference_type: str,
    reference_name: str,
    store: LedgerStore = Depends(get_ledger_store),
):
    """거래의 모든 entry (취소 분개 포함, 삽입 순)"""
    entries = await store.entries_for(reference_type, reference_name)
    return [EntryResponse.from_entry(entry) for entry in entries]


@router.get("/outstanding/{reference_type}/{reference_name}", response_model=OutstandingResponse)
async def get_outstanding(
    reference_type: str,
    reference_name: str,
    grand_total: Decimal = Query(..., description="송장 총액"),
    reports: ReportEngine = Depends(get_report_engine),
):
    """미결제 잔액 = 총액 - 유효 결제 배분"""
    try:
        total = Money.of(grand_total, reports.config.precision)
    except InvalidScale as e:
        raise HTTPException(status_code=422, detail=str(e))

    outstanding = await reports.outstanding(reference_type, reference_name, total)
    return OutstandingResponse(
        reference_type=reference_type,
        reference_name=reference_name,
        grand_total=str(total),
        settled=str(total - outstanding),
        outstanding=str(outstanding),
    )
