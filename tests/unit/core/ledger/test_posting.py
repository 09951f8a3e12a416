"""
Posting 테스트

라인 추가 검증, 균형 검증, round-off, 커밋 거부
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from core.config.loader import LedgerConfig
from core.ledger.accounts import ChartOfAccounts
from core.ledger.errors import (
    EmptyPosting,
    InvalidAccount,
    InvalidScale,
    NegativeAmount,
    PostingClosed,
    UnbalancedPosting,
)
from core.ledger.money import Money
from core.ledger.posting import LedgerContext, Posting


@pytest.fixture
def posting(context: LedgerContext) -> Posting:
    return context.new_posting("JournalEntry", "JV-0001", date(2026, 1, 5), party="ACME")


class TestPostingLines:
    """라인 추가 테스트"""

    def test_debit_credit_totals(self, posting: Posting) -> None:
        posting.debit("Cash", "100.00")
        posting.credit("Sales", "60.00")
        posting.credit("Service Income", "40.00")

        assert len(posting.lines) == 3
        assert posting.debit_total == Money.of("100.00")
        assert posting.credit_total == Money.of("100.00")
        assert posting.difference.is_zero()

    def test_lines_share_reference_and_date(self, posting: Posting) -> None:
        line = posting.debit("Cash", "10.00")

        assert line.reference_type == "JournalEntry"
        assert line.reference_name == "JV-0001"
        assert line.date == date(2026, 1, 5)

    def test_default_party(self, posting: Posting) -> None:
        """라인 party 미지정 시 Posting 기본값"""
        assert posting.debit("Debtors", "10.00").party == "ACME"
        assert posting.credit("Sales", "10.00", party="OTHER").party == "OTHER"

    def test_zero_line_dropped(self, posting: Posting) -> None:
        assert posting.debit("Cash", "0") is None
        assert posting.lines == []

    def test_negative_amount(self, posting: Posting) -> None:
        with pytest.raises(NegativeAmount):
            posting.debit("Cash", "-1.00")

    def test_group_account_rejected(self, posting: Posting) -> None:
        with pytest.raises(InvalidAccount):
            posting.debit("Current Assets", "1.00")

    def test_unknown_account_rejected(self, posting: Posting) -> None:
        with pytest.raises(InvalidAccount):
            posting.credit("Nonexistent", "1.00")

    def test_excess_precision_rejected(self, posting: Posting) -> None:
        with pytest.raises(InvalidScale):
            posting.debit("Cash", "1.005")

    def test_settle(self, posting: Posting) -> None:
        settlement = posting.settle("SalesInvoice", "SINV-0001", "50.00")

        assert settlement.source_type == "JournalEntry"
        assert settlement.source_name == "JV-0001"
        assert settlement.amount == Money.of("50.00")
        assert posting.settlements == [settlement]


class TestPostingBalance:
    """균형 검증 / round-off 테스트"""

    def test_unbalanced(self, posting: Posting) -> None:
        posting.debit("Cash", "100.00")
        posting.credit("Sales", "99.00")

        with pytest.raises(UnbalancedPosting) as exc_info:
            posting.validate_balanced()

        assert exc_info.value.difference == Money.of("1.00")

    def test_round_off_debit(self, posting: Posting) -> None:
        """33.33 x 3 = 99.99 vs 100.00 → Round Off 차변 0.01"""
        posting.credit("Sales", "100.00")
        for _ in range(3):
            posting.debit("Cash", "33.33")

        line = posting.apply_round_off()

        assert line is not None
        assert line.account == "Round Off"
        assert line.debit == Money.of("0.01")
        posting.validate_balanced()

    def test_round_off_credit(self, posting: Posting) -> None:
        posting.debit("Cash", "100.01")
        posting.credit("Sales", "100.00")

        line = posting.apply_round_off()

        assert line.credit == Money.of("0.01")

    def test_round_off_noop_when_balanced(self, posting: Posting) -> None:
        posting.debit("Cash", "10.00")
        posting.credit("Sales", "10.00")

        assert posting.apply_round_off() is None
        assert len(posting.lines) == 2

    def test_round_off_limit(self, posting: Posting) -> None:
        """차액이 한도를 넘으면 흡수하지 않음"""
        posting.debit("Cash", "105.00")
        posting.credit("Sales", "100.00")

        with pytest.raises(UnbalancedPosting):
            posting.apply_round_off()
        assert len(posting.lines) == 2

    def test_round_off_custom_account_and_limit(self, chart: ChartOfAccounts) -> None:
        config = LedgerConfig(round_off_account="Write Off", round_off_limit=Decimal("10"))
        posting = LedgerContext(chart, config).new_posting("JournalEntry", "JV-2", date(2026, 1, 5))
        posting.debit("Cash", "105.00")
        posting.credit("Sales", "100.00")

        line = posting.apply_round_off()

        assert line.account == "Write Off"
        assert line.credit == Money.of("5.00")


class TestPostingCommit:
    """커밋 테스트 (저장소는 mock)"""

    @pytest.mark.asyncio
    async def test_commit_appends_lines(self, posting: Posting) -> None:
        posting.debit("Cash", "10.00")
        posting.credit("Sales", "10.00")
        posting.settle("SalesInvoice", "SINV-1", "10.00")
        store = AsyncMock()
        store.append.return_value = posting.lines

        entries = await posting.commit(store)

        store.append.assert_awaited_once_with(posting.lines, posting.settlements)
        assert entries == posting.lines

    @pytest.mark.asyncio
    async def test_unbalanced_never_reaches_store(self, posting: Posting) -> None:
        posting.debit("Cash", "10.00")
        posting.credit("Sales", "9.00")
        store = AsyncMock()

        with pytest.raises(UnbalancedPosting):
            await posting.commit(store)

        store.append.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_posting(self, posting: Posting) -> None:
        with pytest.raises(EmptyPosting):
            await posting.commit(AsyncMock())

    @pytest.mark.asyncio
    async def test_posting_closed_after_commit(self, posting: Posting) -> None:
        posting.debit("Cash", "10.00")
        posting.credit("Sales", "10.00")
        await posting.commit(AsyncMock())

        with pytest.raises(PostingClosed):
            await posting.commit(AsyncMock())
        with pytest.raises(PostingClosed):
            posting.debit("Cash", "1.00")

    @pytest.mark.asyncio
    async def test_store_failure_keeps_posting_open(self, posting: Posting) -> None:
        """저장 실패 시 재시도 가능"""
        posting.debit("Cash", "10.00")
        posting.credit("Sales", "10.00")
        store = AsyncMock()
        store.append.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError):
            await posting.commit(store)

        store.append.side_effect = None
        await posting.commit(store)
        assert store.append.await_count == 2
