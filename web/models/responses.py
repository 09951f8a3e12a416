"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 정밀도 손실 방지를 위해 모두 문자열.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from core.ledger.entry import LedgerEntry
from core.ledger.reports import (
    BalanceSheet,
    GeneralLedger,
    ProfitAndLoss,
    StatementRow,
    TrialBalance,
)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    timestamp: dt.datetime = Field(..., description="응답 시간 (UTC)")


class EntryResponse(BaseModel):
    """Ledger entry 응답"""

    entry_id: str = Field(..., description="entry ID")
    seq: int | None = Field(default=None, description="삽입 순번")
    account: str = Field(..., description="계정")
    date: dt.date = Field(..., description="전기일")
    party: str | None = Field(default=None, description="거래처")
    debit: str = Field(..., description="차변 금액")
    credit: str = Field(..., description="대변 금액")
    reference_type: str = Field(..., description="원 거래 유형")
    reference_name: str = Field(..., description="원 거래 이름")
    reverted: bool = Field(..., description="취소 여부")
    reverts: str | None = Field(default=None, description="취소 대상 entry ID")
    memo: str | None = Field(default=None, description="메모")

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> EntryResponse:
        return cls(**entry.to_dict())


class GeneralLedgerRowResponse(EntryResponse):
    """General Ledger 라인 (누적 잔액 포함)"""

    balance: str = Field(..., description="누적 잔액 (차변 - 대변)")


class GeneralLedgerResponse(BaseModel):
    """General Ledger 응답"""

    account: str
    from_date: dt.date | None = None
    to_date: dt.date | None = None
    opening_balance: str
    closing_balance: str
    total_debit: str
    total_credit: str
    rows: list[GeneralLedgerRowResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: GeneralLedger) -> GeneralLedgerResponse:
        return cls(
            account=report.account,
            from_date=report.from_date,
            to_date=report.to_date,
            opening_balance=str(report.opening_balance),
            closing_balance=str(report.closing_balance),
            total_debit=str(report.total_debit),
            total_credit=str(report.total_credit),
            rows=[
                GeneralLedgerRowResponse(**row.entry.to_dict(), balance=str(row.balance))
                for row in report.rows
            ],
        )


class TrialBalanceRowResponse(BaseModel):
    account: str
    account_type: str
    debit: str
    credit: str
    balance: str


class TrialBalanceResponse(BaseModel):
    """시산표 응답"""

    as_of: dt.date
    total_debit: str
    total_credit: str
    is_balanced: bool = Field(..., description="차변 합계 == 대변 합계")
    rows: list[TrialBalanceRowResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: TrialBalance) -> TrialBalanceResponse:
        return cls(
            as_of=report.as_of,
            total_debit=str(report.total_debit),
            total_credit=str(report.total_credit),
            is_balanced=report.is_balanced,
            rows=[
                TrialBalanceRowResponse(
                    account=row.account,
                    account_type=row.account_type.value,
                    debit=str(row.debit),
                    credit=str(row.credit),
                    balance=str(row.balance),
                )
                for row in report.rows
            ],
        )


class StatementRowResponse(BaseModel):
    """재무제표 라인"""

    account: str
    account_type: str
    depth: int = Field(..., description="계층 깊이 (루트 = 0)")
    is_group: bool
    balance: str

    @classmethod
    def from_row(cls, row: StatementRow) -> StatementRowResponse:
        return cls(
            account=row.account,
            account_type=row.account_type.value,
            depth=row.depth,
            is_group=row.is_group,
            balance=str(row.balance),
        )


class BalanceSheetResponse(BaseModel):
    """재무상태표 응답"""

    as_of: dt.date
    total_assets: str
    total_liabilities: str
    total_equity: str
    provisional_profit: str = Field(..., description="미마감 손익 (수익 - 비용)")
    residual: str = Field(..., description="자산 - (부채 + 자본)")
    is_balanced: bool
    rows: list[StatementRowResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: BalanceSheet) -> BalanceSheetResponse:
        return cls(
            as_of=report.as_of,
            total_assets=str(report.total_assets),
            total_liabilities=str(report.total_liabilities),
            total_equity=str(report.total_equity),
            provisional_profit=str(report.provisional_profit),
            residual=str(report.residual),
            is_balanced=report.is_balanced,
            rows=[StatementRowResponse.from_row(row) for row in report.rows],
        )


class ProfitAndLossResponse(BaseModel):
    """손익계산서 응답"""

    from_date: dt.date | None = None
    to_date: dt.date | None = None
    total_income: str
    total_expense: str
    net_profit: str
    rows: list[StatementRowResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ProfitAndLoss) -> ProfitAndLossResponse:
        return cls(
            from_date=report.from_date,
            to_date=report.to_date,
            total_income=str(report.total_income),
            total_expense=str(report.total_expense),
            net_profit=str(report.net_profit),
            rows=[StatementRowResponse.from_row(row) for row in report.rows],
        )


class OutstandingResponse(BaseModel):
    """미결제 잔액 응답"""

    reference_type: str
    reference_name: str
    grand_total: str
    settled: str
    outstanding: str
