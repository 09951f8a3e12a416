"""
복식부기 스키마 초기화

Web/스크립트 시작 시 자동으로 Ledger 테이블과 인덱스 생성.
CREATE IF NOT EXISTS 패턴으로 여러 번 호출해도 안전하게 동작.

금액은 Decimal 문자열(TEXT)로 저장 - SQLite REAL 변환에 따른 오차 방지.
"""

import logging
from typing import TYPE_CHECKING

from core.ledger.types import DEFAULT_CHART

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter", seed_chart: bool = True) -> None:
    """Ledger 스키마 초기화 (테이블 + 인덱스 + 트리거)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
        seed_chart: 기본 계정과목표 삽입 여부
    """
    await _create_ledger_tables(db)
    await _create_append_only_triggers(db)
    if seed_chart:
        await _insert_default_chart(db)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # account 테이블 (계정과목표)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            name             TEXT PRIMARY KEY,
            account_type     TEXT NOT NULL,
            parent           TEXT,
            is_group         INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            FOREIGN KEY (parent) REFERENCES account(name)
        )
    """)

    # ledger_entry 테이블 (append-only)
    # seq: 같은 날짜 내 삽입 순서 → (date, seq) 전순서
    await db.execute("""
        CREATE TABLE IF NOT EXISTS ledger_entry (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL UNIQUE,
            account          TEXT NOT NULL,
            date             TEXT NOT NULL,
            party            TEXT,
            debit            TEXT NOT NULL,
            credit           TEXT NOT NULL,
            reference_type   TEXT NOT NULL,
            reference_name   TEXT NOT NULL,
            reverted         INTEGER NOT NULL DEFAULT 0,
            reverts          TEXT,
            memo             TEXT,
            created_at       TEXT NOT NULL,
            FOREIGN KEY (account) REFERENCES account(name),
            FOREIGN KEY (reverts) REFERENCES ledger_entry(entry_id)
        )
    """)

    # settlement 테이블 (결제 배분)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS settlement (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            source_type      TEXT NOT NULL,
            source_name      TEXT NOT NULL,
            reference_type   TEXT NOT NULL,
            reference_name   TEXT NOT NULL,
            amount           TEXT NOT NULL,
            cancelled        INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # 인덱스 생성
    await db.execute("CREATE INDEX IF NOT EXISTS idx_account_parent ON account(parent)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_ledger_entry_account ON ledger_entry(account, date, seq)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_ledger_entry_date ON ledger_entry(date, seq)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_ledger_entry_reference ON ledger_entry(reference_type, reference_name)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_ledger_entry_reverts ON ledger_entry(reverts)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_settlement_reference ON settlement(reference_type, reference_name)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_settlement_source ON settlement(source_type, source_name)")

    await db.commit()
    logger.debug("Ledger 테이블 생성 완료")


async def _create_append_only_triggers(db: "SQLiteAdapter") -> None:
    """감사 추적 보호 트리거

    - ledger_entry 삭제 금지
    - reverted 외 컬럼 수정 금지
    - reverted는 0 → 1 전이만 허용
    """
    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_ledger_entry_no_delete
        BEFORE DELETE ON ledger_entry
        BEGIN
            SELECT RAISE(ABORT, 'ledger_entry is append-only');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_ledger_entry_immutable
        BEFORE UPDATE OF seq, entry_id, account, date, party, debit, credit,
                         reference_type, reference_name, reverts, created_at
        ON ledger_entry
        BEGIN
            SELECT RAISE(ABORT, 'ledger_entry columns are immutable');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_ledger_entry_revert_once
        BEFORE UPDATE OF reverted ON ledger_entry
        WHEN NOT (OLD.reverted = 0 AND NEW.reverted = 1)
        BEGIN
            SELECT RAISE(ABORT, 'reverted can only change from 0 to 1');
        END
    """)

    await db.commit()


async def _insert_default_chart(db: "SQLiteAdapter") -> None:
    """기본 계정과목표 삽입

    DEFAULT_CHART에 정의된 모든 계정을 생성 (부모 → 자식 순서).
    이미 존재하는 계정은 무시 (INSERT OR IGNORE).
    """
    await db.executemany(
        """
        INSERT OR IGNORE INTO account (name, account_type, parent, is_group)
        VALUES (?, ?, ?, ?)
        """,
        DEFAULT_CHART,
    )

    await db.commit()
    logger.debug("기본 계정 삽입 완료")
