"""LedgerStore 통합 테스트"""

import asyncio
from datetime import date

import aiosqlite
import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.entry import LedgerEntry, LedgerFilter
from core.ledger.errors import AlreadyReverted, EntryNotFound, InvalidAccount, StoreUnavailable
from core.ledger.money import Money
from core.ledger.posting import LedgerContext
from core.ledger.reports import ReportEngine
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import OrderBy


def make_entry(
    account: str,
    debit: str = "0",
    credit: str = "0",
    on: date = date(2026, 1, 5),
    name: str = "JV-0001",
) -> LedgerEntry:
    return LedgerEntry(
        account=account,
        date=on,
        debit=Money.of(debit),
        credit=Money.of(credit),
        reference_type="JournalEntry",
        reference_name=name,
    )


async def post_journal(
    store: LedgerStore,
    name: str,
    on: date,
    debit_account: str,
    credit_account: str,
    amount: str,
) -> list[LedgerEntry]:
    return await store.append([
        make_entry(debit_account, debit=amount, on=on, name=name),
        make_entry(credit_account, credit=amount, on=on, name=name),
    ])


class TestSchema:
    """스키마 초기화 테스트"""

    @pytest.mark.asyncio
    async def test_tables_created(self, db: SQLiteAdapter) -> None:
        for table in ("account", "ledger_entry", "settlement"):
            assert await db.table_exists(table) is True

    @pytest.mark.asyncio
    async def test_idempotent(self, db: SQLiteAdapter) -> None:
        """여러 번 실행해도 계정 중복 없음"""
        before = (await db.fetchone("SELECT COUNT(*) FROM account"))[0]

        await init_ledger_schema(db)

        assert (await db.fetchone("SELECT COUNT(*) FROM account"))[0] == before

    @pytest.mark.asyncio
    async def test_delete_blocked(self, store: LedgerStore, db: SQLiteAdapter) -> None:
        """ledger_entry는 append-only"""
        await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute("DELETE FROM ledger_entry")
        await db.rollback()

    @pytest.mark.asyncio
    async def test_amount_update_blocked(self, store: LedgerStore, db: SQLiteAdapter) -> None:
        await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute("UPDATE ledger_entry SET debit = '999.00'")
        await db.rollback()


class TestAppend:
    """배치 추가 테스트"""

    @pytest.mark.asyncio
    async def test_append_assigns_seq(self, store: LedgerStore) -> None:
        entries = await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "100")

        assert [e.seq for e in entries] == [1, 2]
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_roundtrip(self, store: LedgerStore) -> None:
        entries = await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "100.50")

        loaded = await store.get_entry(entries[0].entry_id)

        assert loaded.account == "Cash"
        assert loaded.debit == Money.of("100.50")
        assert loaded.credit.is_zero()
        assert loaded.date == date(2026, 1, 1)
        assert loaded.seq == entries[0].seq
        assert await store.get_entry("missing") is None

    @pytest.mark.asyncio
    async def test_failed_batch_is_invisible(self, store: LedgerStore) -> None:
        """배치 중 하나라도 실패하면 전체 미반영"""
        await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "100")
        batch = [
            make_entry("Cash", debit="5", name="JV-2"),
            make_entry("Not In Table", credit="5", name="JV-2"),  # FK 위반
        ]

        with pytest.raises(StoreUnavailable):
            await store.append(batch)

        assert await store.count() == 2
        assert all(e.seq is None for e in batch)
        assert await store.entries_for("JournalEntry", "JV-2") == []

    @pytest.mark.asyncio
    async def test_rejected_posting_leaves_store_unchanged(
        self, store: LedgerStore, context: LedgerContext
    ) -> None:
        """그룹 계정 분개 → Posting 단계에서 거부"""
        posting = context.new_posting("JournalEntry", "JV-3", date(2026, 1, 1))

        with pytest.raises(InvalidAccount):
            posting.debit("Current Assets", "10")

        assert await store.count() == 0


class TestQuery:
    """조회 테스트"""

    @pytest.mark.asyncio
    async def test_chronological_order(self, store: LedgerStore) -> None:
        """(date, seq) 순 - 늦게 추가된 과거 날짜 entry가 앞에 옴"""
        await post_journal(store, "JV-B", date(2026, 1, 10), "Cash", "Capital", "2")
        await post_journal(store, "JV-A", date(2026, 1, 5), "Cash", "Capital", "1")
        await post_journal(store, "JV-C", date(2026, 1, 10), "Cash", "Capital", "3")

        entries = await store.query(LedgerFilter(accounts=("Cash",))).to_list()

        assert [e.reference_name for e in entries] == ["JV-A", "JV-B", "JV-C"]

    @pytest.mark.asyncio
    async def test_insertion_order(self, store: LedgerStore) -> None:
        await post_journal(store, "JV-B", date(2026, 1, 10), "Cash", "Capital", "2")
        await post_journal(store, "JV-A", date(2026, 1, 5), "Cash", "Capital", "1")

        entries = await store.query(LedgerFilter(accounts=("Cash",)), OrderBy.INSERTION).to_list()

        assert [e.reference_name for e in entries] == ["JV-B", "JV-A"]

    @pytest.mark.asyncio
    async def test_query_is_restartable(self, store: LedgerStore) -> None:
        """같은 query를 두 번 순회 (batch_size보다 많은 entry)"""
        for i in range(3):
            await post_journal(store, f"JV-{i}", date(2026, 1, 1 + i), "Cash", "Capital", "1")

        query = store.query()
        first = [e.entry_id async for e in query]
        second = [e.entry_id async for e in query]

        assert len(first) == 6
        assert first == second

    @pytest.mark.asyncio
    async def test_date_range_inclusive(self, store: LedgerStore) -> None:
        for day in (1, 15, 31):
            await post_journal(store, f"JV-{day}", date(2026, 1, day), "Cash", "Capital", "1")

        entries = await store.query(LedgerFilter(
            accounts=("Cash",),
            from_date=date(2026, 1, 1),
            to_date=date(2026, 1, 15),
        )).to_list()

        assert [e.date.day for e in entries] == [1, 15]

    @pytest.mark.asyncio
    async def test_shared_connection_store(self, db: SQLiteAdapter) -> None:
        """reader 없이 쓰기 연결을 공유하는 저장소"""
        store = LedgerStore(db)
        await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "1")

        assert len(await store.query().to_list()) == 2


class TestReversal:
    """취소 처리 테스트"""

    @pytest.mark.asyncio
    async def test_mark_reverted_twice(self, store: LedgerStore) -> None:
        """두 번째 호출은 AlreadyReverted"""
        entries = await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")

        await store.mark_reverted(entries[0].entry_id)

        with pytest.raises(AlreadyReverted):
            await store.mark_reverted(entries[0].entry_id)
        assert (await store.get_entry(entries[0].entry_id)).reverted is True

    @pytest.mark.asyncio
    async def test_mark_reverted_missing(self, store: LedgerStore) -> None:
        with pytest.raises(EntryNotFound):
            await store.mark_reverted("missing")

    @pytest.mark.asyncio
    async def test_reverse_reference(self, store: LedgerStore) -> None:
        entries = await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")

        reversals = await store.reverse_reference("JournalEntry", "JV-1", date(2026, 2, 1))

        assert len(reversals) == 2
        assert {r.reverts for r in reversals} == {e.entry_id for e in entries}
        assert all(r.date == date(2026, 2, 1) for r in reversals)

        reversal = await store.get_reversal_of(entries[0].entry_id)
        assert reversal.credit == Money.of("10")
        assert reversal.reverted is True

        active = await store.query(LedgerFilter(reverted=False)).to_list()
        assert active == []

    @pytest.mark.asyncio
    async def test_reverse_reference_is_idempotent(self, store: LedgerStore) -> None:
        await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")
        await store.reverse_reference("JournalEntry", "JV-1", date(2026, 2, 1))

        again = await store.reverse_reference("JournalEntry", "JV-1", date(2026, 2, 2))

        assert again == []
        assert len(await store.entries_for("JournalEntry", "JV-1")) == 4


class TestConcurrentCommits:
    """동시 커밋 격리 테스트"""

    @pytest.mark.asyncio
    async def test_concurrent_appends_stay_balanced(
        self, store: LedgerStore, reports: ReportEngine
    ) -> None:
        """20개 배치를 동시에 추가해도 모두 반영되고 시산표가 맞음"""
        results = await asyncio.gather(*(
            post_journal(store, f"JV-{i:02d}", date(2026, 1, 1 + i % 28), "Cash", "Capital", f"{i + 1}")
            for i in range(20)
        ))

        assert await store.count() == 40
        assert sorted(e.seq for batch in results for e in batch) == list(range(1, 41))
        # 배치 내 seq는 연속 (배치 간 교차 없음)
        for batch in results:
            assert batch[1].seq == batch[0].seq + 1

        report = await reports.trial_balance(date(2026, 12, 31))
        assert report.is_balanced
        assert report.total_debit == Money.of("210")

    @pytest.mark.asyncio
    async def test_stores_sharing_connection_do_not_interleave(
        self, db: SQLiteAdapter
    ) -> None:
        """같은 쓰기 연결의 두 저장소: 한쪽 실패가 다른 쪽 배치에 영향 없음"""
        failing = LedgerStore(db)
        valid = LedgerStore(db)
        bad_batch = [
            make_entry("Cash", debit="10", name="JV-A"),
            make_entry("Capital", credit="5", name="JV-A"),
            make_entry("Capital", credit="4", name="JV-A"),
            make_entry("Not In Table", credit="1", name="JV-A"),  # FK 위반
        ]
        good_batch = [
            make_entry("Cash", debit="7", name="JV-B"),
            make_entry("Capital", credit="7", name="JV-B"),
        ]

        bad, good = await asyncio.gather(
            failing.append(bad_batch),
            valid.append(good_batch),
            return_exceptions=True,
        )

        assert isinstance(bad, StoreUnavailable)
        assert not isinstance(good, BaseException)
        assert [e.seq is not None for e in good] == [True, True]
        assert await valid.count() == 2
        stored = await valid.query().to_list()
        assert {e.reference_name for e in stored} == {"JV-B"}
        assert db.write_lock.locked() is False

    @pytest.mark.asyncio
    async def test_concurrent_reversals_reverse_once(self, store: LedgerStore) -> None:
        entries = await post_journal(store, "JV-1", date(2026, 1, 1), "Cash", "Capital", "10")

        first, second = await asyncio.gather(
            store.reverse_reference("JournalEntry", "JV-1", date(2026, 2, 1)),
            store.reverse_reference("JournalEntry", "JV-1", date(2026, 2, 1)),
        )

        assert sorted([len(first), len(second)]) == [0, 2]
        stored = await store.entries_for("JournalEntry", "JV-1")
        reverts = sorted(e.reverts for e in stored if e.reverts is not None)
        assert reverts == sorted(e.entry_id for e in entries)
        assert len(stored) == 4
