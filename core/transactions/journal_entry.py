"""
Journal Entry (일반 분개)

사용자가 입력한 차변/대변 라인을 그대로 전기. round-off 없음:
합계가 맞지 않으면 커밋 시 UnbalancedPosting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar

from core.domain.state_machines import DocStatus
from core.ledger.posting import LedgerContext, Posting
from core.ledger.types import ReferenceType


@dataclass(frozen=True)
class JournalEntryLine:
    account: str
    debit: Decimal | str | int = 0
    credit: Decimal | str | int = 0
    party: str | None = None


@dataclass
class JournalEntry:
    """일반 분개"""

    reference_type: ClassVar[str] = ReferenceType.JOURNAL_ENTRY.value

    name: str
    date: date
    lines: list[JournalEntryLine] = field(default_factory=list)
    user_remark: str | None = None
    status: DocStatus = DocStatus.DRAFT

    def build_posting(self, context: LedgerContext) -> Posting:
        posting = context.new_posting(self.reference_type, self.name, self.date)
        for line in self.lines:
            posting.debit(line.account, line.debit, party=line.party, memo=self.user_remark)
            posting.credit(line.account, line.credit, party=line.party, memo=self.user_remark)
        return posting
