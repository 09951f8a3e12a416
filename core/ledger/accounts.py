"""
계정과목표 (Chart of Accounts)

계정 조회, 분류, 그룹 여부, 계층 구조를 제공하는 계정 설정 협력자.
그룹 계정은 직접 분개할 수 없고 하위 계정 잔액을 집계만 한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Iterator

from core.ledger.errors import InvalidAccount
from core.ledger.types import DEFAULT_CHART, AccountType

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    """계정

    Attributes:
        name: 계정 고유 이름 (코드 겸용)
        account_type: ASSET/LIABILITY/EQUITY/INCOME/EXPENSE
        parent: 상위 그룹 계정 이름 (루트면 None)
        is_group: 그룹 계정 여부 (직접 분개 불가)
    """

    name: str
    account_type: AccountType
    parent: str | None = None
    is_group: bool = False


class ChartOfAccounts:
    """계층형 계정과목표

    삽입 순서를 보존하여 보고서의 계정 순서로 사용.
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._accounts: dict[str, Account] = {}
        self._children: dict[str | None, list[str]] = {None: []}
        for account in accounts:
            self.add(account)

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[Any, ...]]) -> ChartOfAccounts:
        """(name, account_type, parent, is_group) 튜플 목록에서 생성

        부모가 자식보다 뒤에 오는 경우도 처리.
        """
        pending = [
            Account(
                name=row[0],
                account_type=AccountType(row[1]),
                parent=row[2],
                is_group=bool(row[3]),
            )
            for row in rows
        ]
        chart = cls()
        while pending:
            # 입력 순서대로 한 번에 추가, 부모가 아직 없는 행만 다음 회차로
            remaining = []
            for account in pending:
                if account.parent is None or account.parent in chart:
                    chart.add(account)
                else:
                    remaining.append(account)
            if len(remaining) == len(pending):
                orphan = remaining[0]
                raise InvalidAccount(orphan.name, f"unknown parent '{orphan.parent}'")
            pending = remaining
        return chart

    @classmethod
    def default(cls) -> ChartOfAccounts:
        """기본 계정과목표"""
        return cls.from_rows(DEFAULT_CHART)

    def add(self, account: Account) -> None:
        """계정 추가

        Raises:
            InvalidAccount: 중복 이름, 알 수 없는 부모, 부모가 그룹이 아님,
                부모와 계정 유형 불일치
        """
        if account.name in self._accounts:
            raise InvalidAccount(account.name, "duplicate account name")

        if account.parent is not None:
            parent = self._accounts.get(account.parent)
            if parent is None:
                raise InvalidAccount(account.name, f"unknown parent '{account.parent}'")
            if not parent.is_group:
                raise InvalidAccount(account.name, f"parent '{parent.name}' is not a group")
            if parent.account_type != account.account_type:
                raise InvalidAccount(
                    account.name,
                    f"type {account.account_type.value} differs from parent "
                    f"{parent.account_type.value}",
                )

        self._accounts[account.name] = account
        self._children.setdefault(account.parent, []).append(account.name)
        self._children.setdefault(account.name, [])

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def get(self, name: str) -> Account | None:
        return self._accounts.get(name)

    def require_postable(self, name: str) -> Account:
        """분개 가능한 계정 조회

        Raises:
            InvalidAccount: 알 수 없는 계정 또는 그룹 계정
        """
        account = self._accounts.get(name)
        if account is None:
            raise InvalidAccount(name, "unknown account")
        if account.is_group:
            raise InvalidAccount(name, "group accounts cannot hold entries")
        return account

    def children(self, name: str | None) -> list[Account]:
        """직계 하위 계정 (name=None이면 루트 계정)"""
        return [self._accounts[c] for c in self._children.get(name, [])]

    def ancestors(self, name: str) -> list[Account]:
        """상위 계정 목록 (가까운 순)"""
        result = []
        account = self._accounts.get(name)
        while account is not None and account.parent is not None:
            account = self._accounts[account.parent]
            result.append(account)
        return result

    def depth(self, name: str) -> int:
        """계층 깊이 (루트 = 0)"""
        return len(self.ancestors(name))

    def walk(self, root: str | None = None) -> Iterator[Account]:
        """깊이 우선 트리 순회 (root 포함, root=None이면 전체)"""
        if root is not None:
            yield self._accounts[root]
        for child in self._children.get(root, []):
            yield from self.walk(child)

    def leaves_under(self, name: str) -> list[str]:
        """해당 계정 아래의 분개 가능한 계정 이름 (자기 자신이 leaf면 자신)"""
        if name not in self._accounts:
            raise InvalidAccount(name, "unknown account")
        return [a.name for a in self.walk(name) if not a.is_group]

    # -------------------------------------------------------------------------
    # 영속화
    # -------------------------------------------------------------------------

    @classmethod
    async def load(cls, db: SQLiteAdapter) -> ChartOfAccounts:
        """account 테이블에서 로드"""
        rows = await db.fetchall(
            """
            SELECT name, account_type, parent, is_group
            FROM account
            ORDER BY rowid
            """
        )
        chart = cls.from_rows(rows)
        logger.debug(f"Loaded chart of accounts: {len(chart)} accounts")
        return chart

    async def save(self, db: SQLiteAdapter) -> None:
        """account 테이블에 저장 (이미 있는 계정은 무시)"""
        async with db.transaction():
            await db.executemany(
                """
                INSERT OR IGNORE INTO account (name, account_type, parent, is_group)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (a.name, a.account_type.value, a.parent, int(a.is_group))
                    for a in self.walk()
                ],
            )
