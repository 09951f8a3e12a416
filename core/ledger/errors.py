"""
Ledger 예외 정의

검증 오류는 저장 전에 로컬에서 발생 (Posting 거부, 재시도 가능).
저장소 오류는 StoreUnavailable로 감싸서 호출자에게 전달.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.ledger.money import Money


class LedgerError(Exception):
    """Ledger 예외 기본 클래스"""
    pass


class InvalidScale(LedgerError):
    """허용 소수점 자리수를 초과한 금액 (반올림 미지정)"""
    pass


class InvalidAccount(LedgerError):
    """알 수 없는 계정 또는 그룹 계정에 대한 분개"""

    def __init__(self, account: str, reason: str):
        self.account = account
        self.reason = reason
        super().__init__(f"Invalid account '{account}': {reason}")


class NegativeAmount(LedgerError):
    """음수 금액 분개"""

    def __init__(self, account: str, amount: Money):
        self.account = account
        self.amount = amount
        super().__init__(f"Negative amount {amount} for account '{account}'")


class InvalidEntry(LedgerError):
    """차변/대변 규칙을 위반한 LedgerEntry"""
    pass


class UnbalancedPosting(LedgerError):
    """차변 합계 != 대변 합계

    Attributes:
        difference: 차변 합계 - 대변 합계 (부호 포함)
    """

    def __init__(self, difference: Money, message: str | None = None):
        self.difference = difference
        super().__init__(message or f"Unbalanced posting: debit - credit = {difference}")


class EmptyPosting(LedgerError):
    """분개 라인이 없는 Posting 커밋 시도"""
    pass


class PostingClosed(LedgerError):
    """이미 커밋된 Posting 재사용"""
    pass


class AlreadyReverted(LedgerError):
    """이미 취소(reverted)된 LedgerEntry 재취소 시도"""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Ledger entry already reverted: {entry_id}")


class EntryNotFound(LedgerError):
    """존재하지 않는 LedgerEntry"""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Ledger entry not found: {entry_id}")


class StoreUnavailable(LedgerError):
    """저장소 I/O 실패 (배치는 반영되지 않음, 재시도 가능)"""
    pass
