"""
SQLite 어댑터

Ledger DB 연결 1개당 SQLiteAdapter 1개.
쓰기 연결은 커밋 락을 함께 소유하고, 보고서는 별도 읽기 전용 연결(WAL 스냅샷)을 사용.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)

# 연결마다 적용하는 PRAGMA
# - journal_mode=WAL: 읽기 연결이 쓰기와 동시에 커밋된 스냅샷 조회
# - busy_timeout: 잠금 대기 상한 (무한 대기 대신 오류)
# - foreign_keys: entry.account → account.name 참조 검사
CONNECTION_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=30000",
    "PRAGMA foreign_keys=ON",
)


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """PRAGMA가 적용된 aiosqlite 연결 생성

    읽기 전용이면 `mode=ro` URI로 열어 쓰기를 DB 수준에서 거부.
    쓰기 연결은 DB 파일 디렉토리가 없으면 만든다.
    """
    path = Path(db_path)
    if readonly:
        conn = await aiosqlite.connect(f"file:{path}?mode=ro", uri=True)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(path))

    for pragma in CONNECTION_PRAGMAS:
        await conn.execute(pragma)

    logger.info(f"Opened ledger DB {path} (readonly={readonly})")
    return conn


class SQLiteAdapter:
    """SQLite 연결 어댑터

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 연결 여부 (보고서 조회용)

    Attributes:
        write_lock: 이 연결의 커밋 락. 한 연결의 트랜잭션은 하나뿐이므로
            같은 어댑터를 공유하는 모든 저장소가 이 락으로 쓰기를 직렬화한다.

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        async with db.write_lock:
            async with db.transaction(immediate=True):
                await db.execute("INSERT INTO ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self.write_lock = asyncio.Lock()
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"Ledger DB not connected: {self.db_path}")
        return self._conn

    async def connect(self) -> None:
        if self._conn is None:
            self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info(f"Closed ledger DB {self.db_path}")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | list[Any] | None = None,
    ) -> aiosqlite.Cursor:
        return await self._require_conn().execute(sql, parameters or ())

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        return await self._require_conn().executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | list[Any] | None = None,
    ) -> tuple[Any, ...] | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | list[Any] | None = None,
    ) -> list[tuple[Any, ...]]:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def commit(self) -> None:
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 경계 (성공 시 커밋, 예외 시 롤백)

        Args:
            immediate: BEGIN IMMEDIATE로 시작하여 첫 SELECT부터 쓰기 잠금 확보
                (조회 후 갱신하는 취소 처리용)

        동시 호출 직렬화는 하지 않는다. 공유 연결에서는 write_lock을 먼저 잡을 것.
        """
        conn = self._require_conn()
        if immediate and not conn.in_transaction:
            await conn.execute("BEGIN IMMEDIATE")

        try:
            yield conn
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'view') AND name=?",
            (table_name,),
        )
        return result is not None

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
