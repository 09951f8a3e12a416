"""core/ledger/types.py 테스트"""

from core.ledger.types import DEFAULT_CHART, AccountType, JournalSide, OrderBy, ReferenceType


class TestAccountType:
    """AccountType 테스트"""

    def test_values(self) -> None:
        assert AccountType.ASSET.value == "ASSET"
        assert AccountType("INCOME") == AccountType.INCOME

    def test_normal_balance_side(self) -> None:
        assert AccountType.ASSET.is_debit_normal
        assert AccountType.EXPENSE.is_debit_normal
        assert not AccountType.LIABILITY.is_debit_normal
        assert not AccountType.EQUITY.is_debit_normal
        assert not AccountType.INCOME.is_debit_normal

    def test_balance_sheet_types(self) -> None:
        assert AccountType.EQUITY.is_balance_sheet
        assert not AccountType.EXPENSE.is_balance_sheet


class TestEnums:
    def test_journal_side(self) -> None:
        assert JournalSide.DEBIT == "DEBIT"
        assert JournalSide.CREDIT == "CREDIT"

    def test_reference_types(self) -> None:
        assert ReferenceType.SALES_INVOICE.value == "SalesInvoice"
        assert ReferenceType.PAYMENT.value == "Payment"

    def test_order_by_members(self) -> None:
        assert {o.name for o in OrderBy} == {"CHRONOLOGICAL", "INSERTION", "ACCOUNT"}


class TestDefaultChart:
    """기본 계정과목표 테스트"""

    def test_unique_names(self) -> None:
        names = [row[0] for row in DEFAULT_CHART]
        assert len(names) == len(set(names))

    def test_parents_defined_before_children(self) -> None:
        seen: set[str] = set()
        for name, _, parent, _ in DEFAULT_CHART:
            assert parent is None or parent in seen
            seen.add(name)

    def test_round_off_account_is_postable(self) -> None:
        rows = {row[0]: row for row in DEFAULT_CHART}
        assert rows["Round Off"][3] == 0
