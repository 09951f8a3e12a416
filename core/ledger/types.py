"""
복식부기 타입 정의

AccountType, JournalSide 등 Ledger 시스템에서 사용하는 Enum과
기본 계정과목표(Chart of Accounts) 정의
"""

from enum import Enum


class AccountType(str, Enum):
    """계정 유형 (복식부기 5대 계정)

    str을 상속하여 JSON 직렬화 가능.
    """

    ASSET = "ASSET"  # 자산
    LIABILITY = "LIABILITY"  # 부채
    EQUITY = "EQUITY"  # 자본
    INCOME = "INCOME"  # 수익
    EXPENSE = "EXPENSE"  # 비용

    @property
    def is_debit_normal(self) -> bool:
        """차변 잔액이 정상인 계정 (자산, 비용)"""
        return self in (AccountType.ASSET, AccountType.EXPENSE)

    @property
    def is_balance_sheet(self) -> bool:
        return self in (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""

    DEBIT = "DEBIT"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "CREDIT"  # 대변 (부채/자본/수익 증가)


class ReferenceType(str, Enum):
    """LedgerEntry를 생성한 거래 유형"""

    SALES_INVOICE = "SalesInvoice"
    PURCHASE_INVOICE = "PurchaseInvoice"
    PAYMENT = "Payment"
    JOURNAL_ENTRY = "JournalEntry"


class OrderBy(str, Enum):
    """LedgerEntry 조회 정렬

    CHRONOLOGICAL은 (date, seq) 전순서 → 같은 날짜도 결정적 누적 잔액.
    """

    CHRONOLOGICAL = "CHRONOLOGICAL"
    INSERTION = "INSERTION"
    ACCOUNT = "ACCOUNT"


# 기본 계정과목표 (스키마 초기화 시 INSERT OR IGNORE)
DEFAULT_CHART: list[tuple[str, str, str | None, int]] = [
    # (name, account_type, parent, is_group)

    # ASSET
    ("Assets", "ASSET", None, 1),
    ("Current Assets", "ASSET", "Assets", 1),
    ("Cash", "ASSET", "Current Assets", 0),
    ("Bank", "ASSET", "Current Assets", 0),
    ("Debtors", "ASSET", "Current Assets", 0),
    ("Input Tax", "ASSET", "Current Assets", 0),
    ("Stock In Hand", "ASSET", "Current Assets", 0),
    ("Fixed Assets", "ASSET", "Assets", 1),
    ("Equipment", "ASSET", "Fixed Assets", 0),

    # LIABILITY
    ("Liabilities", "LIABILITY", None, 1),
    ("Current Liabilities", "LIABILITY", "Liabilities", 1),
    ("Creditors", "LIABILITY", "Current Liabilities", 0),
    ("Duties and Taxes", "LIABILITY", "Current Liabilities", 1),
    ("Output Tax", "LIABILITY", "Duties and Taxes", 0),
    ("Loans", "LIABILITY", "Liabilities", 0),

    # EQUITY
    ("Equity", "EQUITY", None, 1),
    ("Capital", "EQUITY", "Equity", 0),
    ("Retained Earnings", "EQUITY", "Equity", 0),
    ("Opening Balance Equity", "EQUITY", "Equity", 0),

    # INCOME
    ("Income", "INCOME", None, 1),
    ("Direct Income", "INCOME", "Income", 1),
    ("Sales", "INCOME", "Direct Income", 0),
    ("Service Income", "INCOME", "Direct Income", 0),
    ("Indirect Income", "INCOME", "Income", 1),
    ("Discount Received", "INCOME", "Indirect Income", 0),

    # EXPENSE
    ("Expenses", "EXPENSE", None, 1),
    ("Direct Expenses", "EXPENSE", "Expenses", 1),
    ("Cost of Goods Sold", "EXPENSE", "Direct Expenses", 0),
    ("Purchases", "EXPENSE", "Direct Expenses", 0),
    ("Indirect Expenses", "EXPENSE", "Expenses", 1),
    ("Discount Allowed", "EXPENSE", "Indirect Expenses", 0),
    ("Round Off", "EXPENSE", "Indirect Expenses", 0),
    ("Write Off", "EXPENSE", "Indirect Expenses", 0),
    ("Office Expenses", "EXPENSE", "Indirect Expenses", 0),
]
