"""
Ledger 저장소

LedgerEntry의 append-only 저장 및 조회.

원자성/격리:
- append / reverse_reference는 쓰기 연결의 커밋 락 + 단일 DB 트랜잭션 안에서 실행
  → 배치 전체가 보이거나 전혀 보이지 않음
- 조회는 reader 연결(읽기 전용, WAL 스냅샷) 사용 권장.
  reader가 없으면 공유 연결에서 배치마다 커밋 락을 잡아 미커밋 상태를 보지 않음
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, nullcontext
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterable, Sequence

import aiosqlite

from core.constants import Defaults
from core.ledger.entry import LedgerEntry, LedgerFilter, Settlement
from core.ledger.errors import AlreadyReverted, EntryNotFound, StoreUnavailable
from core.ledger.money import Money
from core.ledger.types import OrderBy

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


ENTRY_COLUMNS = """
    seq, entry_id, account, date, party, debit, credit,
    reference_type, reference_name, reverted, reverts, memo, created_at
"""

ORDER_BY_SQL: dict[OrderBy, str] = {
    OrderBy.CHRONOLOGICAL: "date, seq",
    OrderBy.INSERTION: "seq",
    OrderBy.ACCOUNT: "account, date, seq",
}


def _row_to_entry(row: Sequence[Any], scale: int) -> LedgerEntry:
    return LedgerEntry(
        seq=row[0],
        entry_id=row[1],
        account=row[2],
        date=date.fromisoformat(row[3]),
        party=row[4],
        debit=Money.of(row[5], scale),
        credit=Money.of(row[6], scale),
        reference_type=row[7],
        reference_name=row[8],
        reverted=bool(row[9]),
        reverts=row[10],
        memo=row[11],
        created_at=datetime.fromisoformat(row[12]),
    )


class EntryQuery:
    """지연 평가되는 LedgerEntry 시퀀스

    `async for`를 시작할 때마다 새 SELECT를 실행하므로 재시작 가능.
    batch_size 단위로 가져와 메모리 사용량 제한.
    """

    def __init__(
        self,
        store: LedgerStore,
        where: LedgerFilter,
        order_by: OrderBy,
    ):
        self._store = store
        self._where = where
        self._order_by = order_by

    def __aiter__(self) -> AsyncIterator[LedgerEntry]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[LedgerEntry]:
        where_sql, params = self._where.to_sql()
        sql = (
            f"SELECT {ENTRY_COLUMNS} FROM ledger_entry "
            f"WHERE {where_sql} ORDER BY {ORDER_BY_SQL[self._order_by]}"
        )
        store = self._store
        guard = store._read_guard

        try:
            async with guard():
                cursor = await store.reader.execute(sql, params)
            try:
                while True:
                    async with guard():
                        rows = await cursor.fetchmany(store.batch_size)
                    if not rows:
                        break
                    for row in rows:
                        yield _row_to_entry(row, store.scale)
            finally:
                await cursor.close()
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"Ledger query failed: {e}") from e

    async def to_list(self) -> list[LedgerEntry]:
        return [entry async for entry in self]


class LedgerStore:
    """Ledger 저장소

    Args:
        db: 쓰기용 SQLite 어댑터
        reader: 조회용 읽기 전용 어댑터 (None이면 db 공유)
        scale: 금액 소수점 자리수
        batch_size: 조회 시 fetch 단위
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        reader: SQLiteAdapter | None = None,
        scale: int = Defaults.PRECISION,
        batch_size: int = Defaults.QUERY_BATCH_SIZE,
    ):
        self.db = db
        self.reader = reader or db
        self.scale = scale
        self.batch_size = batch_size

    def _read_guard(self) -> Any:
        if self.reader is self.db:
            return self.db.write_lock
        return nullcontext()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """커밋 락 + DB 트랜잭션 경계

        락은 연결(SQLiteAdapter)에 속하므로 같은 연결을 쓰는 저장소끼리도 직렬화.
        블록 안의 모든 쓰기는 함께 커밋되거나 함께 롤백.
        sqlite 오류는 StoreUnavailable로 변환.
        """
        async with self.db.write_lock:
            try:
                async with self.db.transaction(immediate=True):
                    yield
            except aiosqlite.Error as e:
                logger.error(f"Ledger write failed, rolled back: {e}")
                raise StoreUnavailable(f"Ledger store write failed: {e}") from e

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------

    async def append(
        self,
        entries: Iterable[LedgerEntry],
        settlements: Iterable[Settlement] = (),
    ) -> list[LedgerEntry]:
        """배치 원자적 추가

        Returns:
            seq가 부여된 entry 목록

        Raises:
            StoreUnavailable: I/O 실패 (배치 전체 미반영)
        """
        batch = list(entries)
        try:
            async with self.atomic():
                await self._insert_entries(batch)
                await self._insert_settlements(settlements)
        except StoreUnavailable:
            # 롤백된 배치에 부여된 seq 제거
            for entry in batch:
                entry.seq = None
            raise

        logger.debug(f"Appended {len(batch)} ledger entries")
        return batch

    async def _insert_entries(self, entries: list[LedgerEntry]) -> None:
        for entry in entries:
            cursor = await self.db.execute(
                f"""
                INSERT INTO ledger_entry ({ENTRY_COLUMNS})
                VALUES (NULL, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.entry_id,
                    entry.account,
                    entry.date.isoformat(),
                    entry.party,
                    str(entry.debit),
                    str(entry.credit),
                    entry.reference_type,
                    entry.reference_name,
                    int(entry.reverted),
                    entry.reverts,
                    entry.memo,
                    entry.created_at.isoformat(),
                ),
            )
            entry.seq = cursor.lastrowid

    async def _insert_settlements(self, settlements: Iterable[Settlement]) -> None:
        for settlement in settlements:
            await self.db.execute(
                """
                INSERT INTO settlement (
                    source_type, source_name, reference_type, reference_name, amount
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    settlement.source_type,
                    settlement.source_name,
                    settlement.reference_type,
                    settlement.reference_name,
                    str(settlement.amount),
                ),
            )

    async def _set_reverted(self, entry_id: str) -> None:
        row = await self.db.fetchone(
            "SELECT reverted FROM ledger_entry WHERE entry_id = ?",
            (entry_id,),
        )
        if row is None:
            raise EntryNotFound(entry_id)
        if row[0]:
            raise AlreadyReverted(entry_id)
        await self.db.execute(
            "UPDATE ledger_entry SET reverted = 1 WHERE entry_id = ?",
            (entry_id,),
        )

    async def mark_reverted(self, entry_id: str) -> None:
        """reverted False → True

        멱등이 아님: 두 번째 호출은 AlreadyReverted (이중 취소 버그 검출용).

        Raises:
            AlreadyReverted: 이미 reverted
            EntryNotFound: 없는 entry
        """
        async with self.atomic():
            await self._set_reverted(entry_id)

    async def reverse_reference(
        self,
        reference_type: str,
        reference_name: str,
        on: date,
    ) -> list[LedgerEntry]:
        """거래의 미취소 entry 전체를 취소 분개

        취소 분개 추가, 원 entry reverted 처리, 결제 배분 무효화를
        하나의 원자 단위로 실행. 대상은 같은 트랜잭션 안에서 reverted = 0으로
        고르므로 중단 후 재실행하거나 동시에 호출해도 남은 entry만 취소됨.

        Returns:
            새로 추가된 취소 entry 목록
        """
        reversals: list[LedgerEntry] = []

        async with self.atomic():
            rows = await self.db.fetchall(
                f"""
                SELECT {ENTRY_COLUMNS} FROM ledger_entry
                WHERE reference_type = ? AND reference_name = ? AND reverted = 0
                ORDER BY seq
                """,
                (reference_type, reference_name),
            )

            for row in rows:
                original = _row_to_entry(row, self.scale)
                await self._set_reverted(original.entry_id)
                reversals.append(original.reversal(on))

            await self._insert_entries(reversals)

            await self.db.execute(
                """
                UPDATE settlement SET cancelled = 1
                WHERE source_type = ? AND source_name = ? AND cancelled = 0
                """,
                (reference_type, reference_name),
            )

        logger.info(
            f"Reversed {reference_type} {reference_name}: {len(reversals)} entries"
        )
        return reversals

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def query(
        self,
        where: LedgerFilter | None = None,
        order_by: OrderBy = OrderBy.CHRONOLOGICAL,
    ) -> EntryQuery:
        """조건에 맞는 entry의 지연/재시작 가능 시퀀스

        CHRONOLOGICAL 정렬은 (date, seq) 전순서.
        """
        return EntryQuery(self, where or LedgerFilter(), order_by)

    async def _fetchone(self, sql: str, params: tuple[Any, ...]) -> tuple[Any, ...] | None:
        try:
            async with self._read_guard():
                return await self.reader.fetchone(sql, params)
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"Ledger query failed: {e}") from e

    async def get_entry(self, entry_id: str) -> LedgerEntry | None:
        """entry 단건 조회"""
        row = await self._fetchone(
            f"SELECT {ENTRY_COLUMNS} FROM ledger_entry WHERE entry_id = ?",
            (entry_id,),
        )
        return _row_to_entry(row, self.scale) if row else None

    async def get_reversal_of(self, entry_id: str) -> LedgerEntry | None:
        """entry를 취소한 entry (역방향 탐색)"""
        row = await self._fetchone(
            f"SELECT {ENTRY_COLUMNS} FROM ledger_entry WHERE reverts = ?",
            (entry_id,),
        )
        return _row_to_entry(row, self.scale) if row else None

    async def entries_for(
        self,
        reference_type: str,
        reference_name: str,
    ) -> list[LedgerEntry]:
        """거래의 모든 entry (취소 분개 포함, 삽입 순)"""
        return await self.query(
            LedgerFilter(reference_type=reference_type, reference_name=reference_name),
            OrderBy.INSERTION,
        ).to_list()

    async def settled_amount(self, reference_type: str, reference_name: str) -> Money:
        """거래에 배분된 유효 결제 금액 합계"""
        total = Money.zero(self.scale)
        try:
            async with self._read_guard():
                rows = await self.reader.fetchall(
                    """
                    SELECT amount FROM settlement
                    WHERE reference_type = ? AND reference_name = ? AND cancelled = 0
                    """,
                    (reference_type, reference_name),
                )
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"Settlement query failed: {e}") from e

        for (amount,) in rows:
            total = total + Money.of(amount, self.scale)
        return total

    async def count(self) -> int:
        row = await self._fetchone("SELECT COUNT(*) FROM ledger_entry", ())
        return row[0] if row else 0
