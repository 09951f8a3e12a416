"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.responses import (
    BalanceSheetResponse,
    EntryResponse,
    GeneralLedgerResponse,
    GeneralLedgerRowResponse,
    HealthResponse,
    OutstandingResponse,
    ProfitAndLossResponse,
    StatementRowResponse,
    TrialBalanceResponse,
    TrialBalanceRowResponse,
)

__all__ = [
    "HealthResponse",
    "EntryResponse",
    "GeneralLedgerResponse",
    "GeneralLedgerRowResponse",
    "TrialBalanceResponse",
    "TrialBalanceRowResponse",
    "StatementRowResponse",
    "BalanceSheetResponse",
    "ProfitAndLossResponse",
    "OutstandingResponse",
]
