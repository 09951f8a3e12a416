"""
State Machines

거래 문서(Sales Invoice, Payment 등)의 상태 전이 관리.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class InvalidTransition(StateMachineError):
    """허용되지 않은 상태 전이"""

    def __init__(self, name: str, from_state: str, to_state: str, allowed: list[str]):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"{name}: Cannot transition from {from_state} to {to_state}. "
            f"Allowed: {allowed}"
        )


class DocStatus(str, Enum):
    """거래 문서 상태

    전이 규칙:
    - DRAFT → SUBMITTED: 제출 (Posting 커밋 성공 시)
    - SUBMITTED → CANCELLED: 취소 (취소 분개 커밋 성공 시)
    - CANCELLED: 종료 상태
    """
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    CANCELLED = "CANCELLED"


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]],
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions
        self._name = name
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인"""
        target = to_state.value if isinstance(to_state, Enum) else to_state
        allowed = self._transitions.get(self._state, [])
        return target in allowed

    def ensure_can_transition(self, to_state: str | Enum) -> None:
        """전이 가능 여부 검증 (상태 변경 없음)

        Raises:
            InvalidTransition: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state
        if not self.can_transition(target):
            raise InvalidTransition(
                self._name,
                self._state,
                target,
                self._transitions.get(self._state, []),
            )

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            InvalidTransition: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state
        self.ensure_can_transition(target)

        old_state = self._state
        self._state = target
        self._history.append((old_state, target))

        logger.debug(f"{self._name}: {old_state} → {target}")

        return target

    @property
    def history(self) -> list[tuple[str, str]]:
        """상태 전이 이력"""
        return self._history.copy()


class DocStatusMachine(StateMachine):
    """거래 문서 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "DRAFT": ["SUBMITTED"],
        "SUBMITTED": ["CANCELLED"],
        "CANCELLED": [],
    }

    def __init__(self, initial_state: str | DocStatus = DocStatus.DRAFT, name: str = "DocStatusMachine"):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name=name,
        )

    @property
    def is_terminal(self) -> bool:
        """종료 상태 여부"""
        return self._state == DocStatus.CANCELLED.value

    @property
    def is_posted(self) -> bool:
        """Ledger에 반영된 상태 여부"""
        return self._state == DocStatus.SUBMITTED.value
