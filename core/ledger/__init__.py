"""
복식부기 (Double-Entry Bookkeeping) Ledger 엔진

거래 → 균형 잡힌 차변/대변 LedgerEntry → 보고서.

사용 예시:
```python
from core.ledger import ChartOfAccounts, LedgerContext, LedgerStore, ReportEngine

# 초기화
await init_ledger_schema(db)
chart = await ChartOfAccounts.load(db)
store = LedgerStore(db, reader=reader)
context = LedgerContext(chart, settings.ledger)

# 거래 제출 / 취소
controller = TransactionController(store, context)
await controller.submit(invoice)
await controller.cancel(invoice)

# 시산표 조회
reports = ReportEngine(store, chart, settings.ledger)
trial_balance = await reports.trial_balance(date.today())
```
"""

from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.entry import LedgerEntry, LedgerFilter, Settlement
from core.ledger.errors import (
    AlreadyReverted,
    EmptyPosting,
    EntryNotFound,
    InvalidAccount,
    InvalidEntry,
    InvalidScale,
    LedgerError,
    NegativeAmount,
    PostingClosed,
    StoreUnavailable,
    UnbalancedPosting,
)
from core.ledger.lifecycle import Postable, TransactionController
from core.ledger.money import Money
from core.ledger.posting import LedgerContext, Posting
from core.ledger.reports import ReportEngine
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import (
    DEFAULT_CHART,
    AccountType,
    JournalSide,
    OrderBy,
    ReferenceType,
)

__all__ = [
    # 핵심 클래스
    "Money",
    "Account",
    "ChartOfAccounts",
    "LedgerEntry",
    "LedgerFilter",
    "Settlement",
    "Posting",
    "LedgerContext",
    "LedgerStore",
    "TransactionController",
    "Postable",
    "ReportEngine",
    "init_ledger_schema",
    # Enum
    "AccountType",
    "JournalSide",
    "OrderBy",
    "ReferenceType",
    # 상수
    "DEFAULT_CHART",
    # 예외
    "LedgerError",
    "InvalidScale",
    "InvalidAccount",
    "NegativeAmount",
    "InvalidEntry",
    "UnbalancedPosting",
    "EmptyPosting",
    "PostingClosed",
    "AlreadyReverted",
    "EntryNotFound",
    "StoreUnavailable",
]
