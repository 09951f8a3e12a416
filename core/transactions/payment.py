"""
Payment (입금/지급)

RECEIVE: 차변 현금/은행, 대변 Debtors
PAY:     차변 Creditors, 대변 현금/은행

references로 송장별 결제 배분(Settlement)을 함께 기록하며,
결제 취소 시 배분도 무효화되어 송장 미결제 잔액이 복원된다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from core.domain.state_machines import DocStatus
from core.ledger.money import Money
from core.ledger.posting import LedgerContext, Posting
from core.ledger.types import ReferenceType


class PaymentType(str, Enum):
    """결제 방향"""
    RECEIVE = "Receive"
    PAY = "Pay"


@dataclass(frozen=True)
class PaymentReference:
    """결제 배분 대상 송장"""

    reference_type: str
    reference_name: str
    amount: Decimal | str | int


@dataclass
class Payment:
    """입금/지급

    Attributes:
        name: 결제 번호 (예: PAY-0001)
        date: 전기일
        party: 거래처
        payment_type: RECEIVE / PAY
        amount: 실제 입출금 금액
        payment_account: 현금/은행 계정
        party_account: 채권/채무 계정 (None이면 방향별 기본값)
        write_off_amount: 잔액 상각 금액
        write_off_account: 상각 계정
        references: 송장별 배분
    """

    reference_type: ClassVar[str] = ReferenceType.PAYMENT.value

    name: str
    date: date
    party: str
    payment_type: PaymentType
    amount: Decimal | str | int
    payment_account: str = "Cash"
    party_account: str | None = None
    write_off_amount: Decimal | str | int = 0
    write_off_account: str = "Write Off"
    references: list[PaymentReference] = field(default_factory=list)
    status: DocStatus = DocStatus.DRAFT

    @property
    def resolved_party_account(self) -> str:
        if self.party_account:
            return self.party_account
        return "Debtors" if self.payment_type == PaymentType.RECEIVE else "Creditors"

    def build_posting(self, context: LedgerContext) -> Posting:
        """결제 Posting 생성

        Raises:
            ValueError: 금액이 0 이하이거나 배분 합계가 결제 금액 초과
        """
        amount = context.money(self.amount)
        write_off = context.money(self.write_off_amount)
        if not amount.is_positive():
            raise ValueError(f"결제 금액은 양수여야 합니다: {amount}")
        if write_off.is_negative():
            raise ValueError(f"상각 금액은 음수일 수 없습니다: {write_off}")

        party_total = amount + write_off
        allocations = [context.money(ref.amount) for ref in self.references]
        allocated = Money.total(allocations, context.config.precision)
        if allocated > party_total:
            raise ValueError(
                f"배분 합계 {allocated}가 결제 금액 {party_total}을 초과합니다"
            )

        posting = context.new_posting(self.reference_type, self.name, self.date)
        party_account = self.resolved_party_account

        if self.payment_type == PaymentType.RECEIVE:
            posting.debit(self.payment_account, amount)
            if write_off:
                posting.debit(self.write_off_account, write_off)
            posting.credit(party_account, party_total, party=self.party)
        else:
            posting.debit(party_account, party_total, party=self.party)
            posting.credit(self.payment_account, amount)
            if write_off:
                posting.credit(self.write_off_account, write_off)

        for ref, allocation in zip(self.references, allocations):
            posting.settle(ref.reference_type, ref.reference_name, allocation)

        return posting
