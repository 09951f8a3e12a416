"""
pytest 공통 fixture 정의

임시 설정 파일, 임시 Ledger DB, 계정과목표/컨텍스트/저장소 fixture
"""

import tempfile
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import LedgerConfig, Settings
from core.ledger.accounts import ChartOfAccounts
from core.ledger.posting import LedgerContext
from core.ledger.reports import ReportEngine
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.transactions import InvoiceItem, SalesInvoice, TaxLine


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """테스트용 ledger.yaml 파일 생성"""
    config_content = f"""# 테스트용 ledger.yaml
database:
  path: "{(temp_dir / 'ledger.db').as_posix()}"

ledger:
  precision: 2
  rounding: ROUND_HALF_UP
  round_off_account: Round Off
  round_off_limit: "1.00"
  balance_tolerance: "0"

web:
  host: 127.0.0.1
  port: 8100
"""
    config_path = temp_dir / "ledger.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig()


@pytest.fixture
def chart() -> ChartOfAccounts:
    """기본 계정과목표"""
    return ChartOfAccounts.default()


@pytest.fixture
def context(chart: ChartOfAccounts, ledger_config: LedgerConfig) -> LedgerContext:
    return LedgerContext(chart, ledger_config)


@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 Ledger DB (쓰기 연결)"""
    adapter = SQLiteAdapter(temp_dir / "test_ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def reader(db: SQLiteAdapter) -> SQLiteAdapter:
    """같은 DB의 읽기 전용 연결"""
    adapter = SQLiteAdapter(db.db_path, readonly=True)
    await adapter.connect()
    yield adapter
    await adapter.close()


@pytest.fixture
def store(db: SQLiteAdapter, reader: SQLiteAdapter) -> LedgerStore:
    """LedgerStore (쓰기 연결 + 읽기 전용 연결)"""
    return LedgerStore(db, reader=reader, batch_size=2)


@pytest.fixture
def reports(store: LedgerStore, chart: ChartOfAccounts, ledger_config: LedgerConfig) -> ReportEngine:
    return ReportEngine(store, chart, ledger_config)


@pytest.fixture
def sales_invoice() -> SalesInvoice:
    """순액 1000 + 세금 12% 매출 송장"""
    return SalesInvoice(
        name="SINV-0001",
        date=date(2026, 1, 5),
        party="ACME",
        items=[InvoiceItem(account="Sales", rate="1000.00")],
        taxes=[TaxLine(account="Output Tax", rate="12")],
    )
