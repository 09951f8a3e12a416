"""
거래 생명주기 컨트롤러

DRAFT → SUBMITTED (Posting 커밋), SUBMITTED → CANCELLED (취소 분개).
거래 유형(클래스 계층)이 아니라 build_posting 능력(Protocol)에 대해 동작.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Protocol, runtime_checkable

from core.domain.state_machines import DocStatus, DocStatusMachine
from core.ledger.entry import LedgerEntry
from core.ledger.errors import LedgerError
from core.ledger.posting import LedgerContext, Posting
from core.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@runtime_checkable
class Postable(Protocol):
    """Ledger에 전기 가능한 거래

    (reference_type, name)으로 식별되며 정확히 하나의 Posting을 생성.
    """

    reference_type: str
    name: str
    date: date
    status: DocStatus

    def build_posting(self, context: LedgerContext) -> Posting:
        ...


class TransactionController:
    """거래 제출/취소 컨트롤러

    상태는 저장소 반영이 성공한 뒤에만 전이한다.
    실패 시 거래는 이전 상태를 유지하고 예외를 그대로 전달 (재시도 가능).

    Args:
        store: Ledger 저장소
        context: Posting 생성 컨텍스트 (계정과목표 + 설정)
    """

    def __init__(self, store: LedgerStore, context: LedgerContext):
        self.store = store
        self.context = context

    @staticmethod
    def _machine(transaction: Postable) -> DocStatusMachine:
        return DocStatusMachine(
            transaction.status,
            name=f"{transaction.reference_type} {transaction.name}",
        )

    async def submit(self, transaction: Postable) -> list[LedgerEntry]:
        """DRAFT → SUBMITTED

        Returns:
            커밋된 entry 목록

        Raises:
            InvalidTransition: DRAFT 상태가 아님
            InvalidAccount / NegativeAmount / UnbalancedPosting: Posting 검증 실패
            StoreUnavailable: 저장 실패
        """
        machine = self._machine(transaction)
        machine.ensure_can_transition(DocStatus.SUBMITTED)

        try:
            posting = transaction.build_posting(self.context)
            entries = await posting.commit(self.store)
        except LedgerError as e:
            logger.warning(
                f"Submit rejected: {transaction.reference_type} {transaction.name}: {e}"
            )
            raise

        transaction.status = DocStatus(machine.transition(DocStatus.SUBMITTED))
        return entries

    async def cancel(
        self,
        transaction: Postable,
        on: date | None = None,
    ) -> list[LedgerEntry]:
        """SUBMITTED → CANCELLED

        미취소 entry마다 취소 분개를 만들고 원 entry를 reverted 처리.
        이미 CANCELLED인 거래는 아무 것도 하지 않음 (거래 단위 멱등).

        Args:
            transaction: 취소할 거래
            on: 취소 분개 전기일 (None이면 오늘)

        Returns:
            새로 추가된 취소 entry 목록

        Raises:
            InvalidTransition: DRAFT 상태
            StoreUnavailable: 저장 실패 (상태 유지, 재시도 시 남은 entry만 취소)
        """
        machine = self._machine(transaction)
        if machine.is_terminal:
            logger.info(f"Already cancelled: {transaction.reference_type} {transaction.name}")
            return []
        machine.ensure_can_transition(DocStatus.CANCELLED)

        reversals = await self.store.reverse_reference(
            transaction.reference_type,
            transaction.name,
            on or date.today(),
        )

        transaction.status = DocStatus(machine.transition(DocStatus.CANCELLED))
        return reversals
