"""
Posting - 커밋 전 분개 작업 집합

하나의 거래가 소유하는 차변/대변 라인 모음.
균형 검증(차변 합계 == 대변 합계)을 통과해야만 저장소에 원자적으로 커밋.

사용 예시:
```python
posting = context.new_posting("SalesInvoice", "SINV-0001", date(2026, 1, 5))
posting.debit("Debtors", "1120.00", party="ACME")
posting.credit("Sales", "1000.00")
posting.credit("Output Tax", "120.00")
posting.apply_round_off()
await posting.commit(store)
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from core.config.loader import LedgerConfig
from core.ledger.accounts import ChartOfAccounts
from core.ledger.entry import LedgerEntry, Settlement
from core.ledger.errors import (
    EmptyPosting,
    NegativeAmount,
    PostingClosed,
    UnbalancedPosting,
)
from core.ledger.money import Money, Numeric
from core.ledger.types import JournalSide

if TYPE_CHECKING:
    from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class Posting:
    """분개 작업 집합

    Args:
        reference_type: 원 거래 유형
        reference_name: 원 거래 이름
        posting_date: 전기일 (모든 라인 공통)
        chart: 계정과목표 (계정 검증용)
        config: Ledger 설정 (precision, round-off)
        party: 라인 기본 거래처
    """

    def __init__(
        self,
        reference_type: str,
        reference_name: str,
        posting_date: date,
        chart: ChartOfAccounts,
        config: LedgerConfig,
        party: str | None = None,
    ):
        self.reference_type = reference_type
        self.reference_name = reference_name
        self.date = posting_date
        self.chart = chart
        self.config = config
        self.party = party

        self.lines: list[LedgerEntry] = []
        self.settlements: list[Settlement] = []
        self.debit_total = Money.zero(config.precision)
        self.credit_total = Money.zero(config.precision)
        self._committed = False

    def _money(self, amount: Numeric | Money) -> Money:
        return Money.of(amount, self.config.precision)

    def _add_line(
        self,
        side: JournalSide,
        account: str,
        amount: Numeric | Money,
        party: str | None,
        memo: str | None,
    ) -> LedgerEntry | None:
        if self._committed:
            raise PostingClosed(f"Posting already committed: {self.reference_name}")

        value = self._money(amount)
        if value.is_negative():
            raise NegativeAmount(account, value)

        self.chart.require_postable(account)

        # 0원 라인은 회계적 의미가 없으므로 버림
        if value.is_zero():
            return None

        zero = Money.zero(self.config.precision)
        line = LedgerEntry(
            account=account,
            date=self.date,
            debit=value if side == JournalSide.DEBIT else zero,
            credit=value if side == JournalSide.CREDIT else zero,
            reference_type=self.reference_type,
            reference_name=self.reference_name,
            party=party if party is not None else self.party,
            memo=memo,
        )
        self.lines.append(line)

        if side == JournalSide.DEBIT:
            self.debit_total = self.debit_total + value
        else:
            self.credit_total = self.credit_total + value
        return line

    def debit(
        self,
        account: str,
        amount: Numeric | Money,
        party: str | None = None,
        memo: str | None = None,
    ) -> LedgerEntry | None:
        """차변 라인 추가

        Raises:
            InvalidAccount: 알 수 없는 계정 또는 그룹 계정
            NegativeAmount: 음수 금액
            InvalidScale: precision 초과 금액
        """
        return self._add_line(JournalSide.DEBIT, account, amount, party, memo)

    def credit(
        self,
        account: str,
        amount: Numeric | Money,
        party: str | None = None,
        memo: str | None = None,
    ) -> LedgerEntry | None:
        """대변 라인 추가 (예외는 debit과 동일)"""
        return self._add_line(JournalSide.CREDIT, account, amount, party, memo)

    def settle(
        self,
        reference_type: str,
        reference_name: str,
        amount: Numeric | Money,
    ) -> Settlement:
        """결제 배분 기록 (라인과 함께 커밋)"""
        value = self._money(amount)
        if value.is_negative():
            raise NegativeAmount(reference_name, value)
        settlement = Settlement(
            reference_type=reference_type,
            reference_name=reference_name,
            amount=value,
            source_type=self.reference_type,
            source_name=self.reference_name,
        )
        self.settlements.append(settlement)
        return settlement

    @property
    def difference(self) -> Money:
        """차변 합계 - 대변 합계"""
        return self.debit_total - self.credit_total

    def validate_balanced(self) -> None:
        """균형 검증

        Raises:
            UnbalancedPosting: 차변 합계 != 대변 합계
        """
        difference = self.difference
        if not difference.is_zero():
            raise UnbalancedPosting(difference)

    def apply_round_off(self, round_off_account: str | None = None) -> LedgerEntry | None:
        """단수 차이 보정

        라인별로 반올림된 세금/할인 금액이 남기는 잔차를 round-off 계정으로 흡수.
        차액이 round_off_limit을 넘으면 단순 잔차가 아닌 버그로 보고 거부.

        Returns:
            추가된 보정 라인 (차액이 0이면 None)

        Raises:
            UnbalancedPosting: 차액이 round_off_limit 초과
        """
        difference = self.difference
        if difference.is_zero():
            return None

        limit = Money.of(self.config.round_off_limit, self.config.precision, self.config.rounding)
        if abs(difference) > limit:
            raise UnbalancedPosting(
                difference,
                f"Round-off difference {difference} exceeds limit {limit} "
                f"({self.reference_type} {self.reference_name})",
            )

        account = round_off_account or self.config.round_off_account
        logger.debug(
            "Round-off applied",
            extra={
                "reference_name": self.reference_name,
                "difference": str(difference),
                "account": account,
            },
        )
        if difference.is_positive():
            return self.credit(account, abs(difference))
        return self.debit(account, abs(difference))

    async def commit(self, store: LedgerStore) -> list[LedgerEntry]:
        """저장소에 원자적으로 커밋

        Raises:
            UnbalancedPosting: 균형 검증 실패 (저장 전 거부)
            EmptyPosting: 라인 없음
            PostingClosed: 이미 커밋됨
            StoreUnavailable: 저장소 I/O 실패 (아무 라인도 반영되지 않음)
        """
        if self._committed:
            raise PostingClosed(f"Posting already committed: {self.reference_name}")
        if not self.lines:
            raise EmptyPosting(f"No ledger lines for {self.reference_type} {self.reference_name}")

        self.validate_balanced()

        entries = await store.append(self.lines, self.settlements)
        self._committed = True

        logger.info(
            f"Posted {self.reference_type} {self.reference_name}: "
            f"{len(entries)} lines, total {self.debit_total}"
        )
        return entries


@dataclass
class LedgerContext:
    """거래 유형이 Posting을 만들 때 받는 컨텍스트

    계정과목표와 Ledger 설정을 전역 상태 대신 명시적으로 전달.
    """

    chart: ChartOfAccounts
    config: LedgerConfig = field(default_factory=LedgerConfig)

    def new_posting(
        self,
        reference_type: str,
        reference_name: str,
        posting_date: date,
        party: str | None = None,
    ) -> Posting:
        return Posting(
            reference_type=reference_type,
            reference_name=reference_name,
            posting_date=posting_date,
            chart=self.chart,
            config=self.config,
            party=party,
        )

    def money(self, amount: Numeric | Money) -> Money:
        """설정된 precision의 Money 생성"""
        return Money.of(amount, self.config.precision)
