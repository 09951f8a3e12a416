"""
LedgerEntry 모델

확정된 차변/대변 라인 하나. 생성 후 변경 가능한 것은 reverted 플래그 뿐이며
(False → True, 1회), 삭제되지 않는다 (감사 추적).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

from core.ledger.errors import InvalidEntry, NegativeAmount
from core.ledger.money import Money
from core.ledger.types import JournalSide


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LedgerEntry:
    """분개 라인

    debit/credit 중 정확히 하나만 0이 아니어야 함.

    Attributes:
        account: 계정 이름 (leaf 계정)
        date: 전기일
        debit: 차변 금액
        credit: 대변 금액
        reference_type: 원 거래 유형 (SalesInvoice, Payment, ...)
        reference_name: 원 거래 이름
        party: 거래처 (선택)
        reverted: 취소 여부
        reverts: 이 라인이 취소하는 원 라인의 entry_id
        seq: 저장소가 부여하는 삽입 순번
    """

    account: str
    date: date
    debit: Money
    credit: Money
    reference_type: str
    reference_name: str
    party: str | None = None
    memo: str | None = None
    entry_id: str = field(default_factory=_new_id)
    reverted: bool = False
    reverts: str | None = None
    seq: int | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        for amount in (self.debit, self.credit):
            if amount.is_negative():
                raise NegativeAmount(self.account, amount)
        if self.debit.is_zero() == self.credit.is_zero():
            raise InvalidEntry(
                f"Exactly one of debit/credit must be non-zero "
                f"(account={self.account}, debit={self.debit}, credit={self.credit})"
            )

    @property
    def side(self) -> JournalSide:
        return JournalSide.DEBIT if self.debit.is_positive() else JournalSide.CREDIT

    @property
    def amount(self) -> Money:
        """0이 아닌 쪽 금액"""
        return self.debit if self.debit.is_positive() else self.credit

    @property
    def net(self) -> Money:
        """차변 - 대변"""
        return self.debit - self.credit

    def reversal(self, on: date) -> LedgerEntry:
        """취소 분개 생성 (차/대 교환, 같은 계정, 새 날짜)

        취소 라인은 태어날 때부터 reverted=True.
        → 미취소 조회에서 원 라인과 함께 제외되고, 재취소 대상이 되지 않음.
        """
        return replace(
            self,
            date=on,
            debit=self.credit,
            credit=self.debit,
            entry_id=_new_id(),
            reverted=True,
            reverts=self.entry_id,
            seq=None,
            created_at=_utcnow(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "seq": self.seq,
            "account": self.account,
            "date": self.date.isoformat(),
            "party": self.party,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "reference_type": self.reference_type,
            "reference_name": self.reference_name,
            "reverted": self.reverted,
            "reverts": self.reverts,
            "memo": self.memo,
        }


@dataclass(frozen=True)
class Settlement:
    """결제 배분 (Payment → Invoice)

    Payment 커밋과 같은 트랜잭션으로 저장되고, Payment 취소 시 함께 무효화.
    """

    reference_type: str  # 결제 대상 거래 유형 (SalesInvoice 등)
    reference_name: str
    amount: Money
    source_type: str  # 결제 거래 (Payment)
    source_name: str


@dataclass(frozen=True)
class LedgerFilter:
    """LedgerEntry 조회 조건

    날짜 범위는 양끝 포함. None인 조건은 적용하지 않음.
    """

    accounts: tuple[str, ...] | None = None
    from_date: date | None = None
    to_date: date | None = None
    before_date: date | None = None  # from_date 이전 (미포함) - 기초 잔액 계산용
    reference_type: str | None = None
    reference_name: str | None = None
    party: str | None = None
    reverted: bool | None = None

    def to_sql(self) -> tuple[str, list[Any]]:
        """WHERE 절과 파라미터 생성"""
        clauses: list[str] = []
        params: list[Any] = []

        if self.accounts is not None:
            if not self.accounts:
                clauses.append("0")
            else:
                placeholders = ", ".join("?" for _ in self.accounts)
                clauses.append(f"account IN ({placeholders})")
                params.extend(self.accounts)
        if self.from_date is not None:
            clauses.append("date >= ?")
            params.append(self.from_date.isoformat())
        if self.to_date is not None:
            clauses.append("date <= ?")
            params.append(self.to_date.isoformat())
        if self.before_date is not None:
            clauses.append("date < ?")
            params.append(self.before_date.isoformat())
        if self.reference_type is not None:
            clauses.append("reference_type = ?")
            params.append(self.reference_type)
        if self.reference_name is not None:
            clauses.append("reference_name = ?")
            params.append(self.reference_name)
        if self.party is not None:
            clauses.append("party = ?")
            params.append(self.party)
        if self.reverted is not None:
            clauses.append("reverted = ?")
            params.append(int(self.reverted))

        where = " AND ".join(clauses) if clauses else "1"
        return where, params
