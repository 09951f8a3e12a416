"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    PRECISION: int = 2  # 소수점 자리수 (센트 단위)
    ROUNDING: str = "ROUND_HALF_UP"

    ROUND_OFF_ACCOUNT: str = "Round Off"
    ROUND_OFF_LIMIT: Decimal = Decimal("1.00")  # 이 금액 초과 차액은 버그로 간주
    BALANCE_TOLERANCE: Decimal = Decimal("0")

    QUERY_BATCH_SIZE: int = 500

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    CONFIG_FILE: Path = CONFIG_DIR / "ledger.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
