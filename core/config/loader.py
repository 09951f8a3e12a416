"""
설정 로더

ledger.yaml 로드 및 Ledger 설정 생성
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths

# decimal 모듈이 지원하는 반올림 모드
ROUNDING_MODES: set[str] = {
    "ROUND_CEILING",
    "ROUND_DOWN",
    "ROUND_FLOOR",
    "ROUND_HALF_DOWN",
    "ROUND_HALF_EVEN",
    "ROUND_HALF_UP",
    "ROUND_UP",
    "ROUND_05UP",
}


@dataclass(frozen=True)
class LedgerConfig:
    """Posting/Report에 명시적으로 전달되는 Ledger 설정

    전역 상태 대신 이 값을 Posting 생성 및 Report 호출 시 넘긴다.
    """

    precision: int = Defaults.PRECISION
    rounding: str = ROUND_HALF_UP
    round_off_account: str = Defaults.ROUND_OFF_ACCOUNT
    round_off_limit: Decimal = Defaults.ROUND_OFF_LIMIT
    balance_tolerance: Decimal = Defaults.BALANCE_TOLERANCE


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppConfig:
    """ledger.yaml 전체 설정

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    web: WebConfig = field(default_factory=WebConfig)


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _to_decimal(value: Any, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigLoadError(f"'{key}' 값이 숫자가 아닙니다: {value!r}") from e


def parse_ledger_config(data: dict[str, Any]) -> LedgerConfig:
    """ledger 섹션 파싱

    Raises:
        ConfigLoadError: 값이 유효하지 않은 경우
    """
    precision = data.get("precision", Defaults.PRECISION)
    if not isinstance(precision, int) or precision < 0:
        raise ConfigLoadError(f"ledger.precision은 0 이상의 정수여야 합니다: {precision!r}")

    rounding = str(data.get("rounding", Defaults.ROUNDING)).upper()
    if rounding not in ROUNDING_MODES:
        raise ConfigLoadError(
            f"유효하지 않은 rounding입니다: '{rounding}'. "
            f"유효한 값: {sorted(ROUNDING_MODES)}"
        )

    round_off_account = data.get("round_off_account", Defaults.ROUND_OFF_ACCOUNT)
    if not round_off_account:
        raise ConfigLoadError("ledger.round_off_account가 비어 있습니다")

    round_off_limit = _to_decimal(
        data.get("round_off_limit", Defaults.ROUND_OFF_LIMIT), "ledger.round_off_limit"
    )
    balance_tolerance = _to_decimal(
        data.get("balance_tolerance", Defaults.BALANCE_TOLERANCE), "ledger.balance_tolerance"
    )
    if round_off_limit < 0 or balance_tolerance < 0:
        raise ConfigLoadError("round_off_limit / balance_tolerance는 음수일 수 없습니다")

    return LedgerConfig(
        precision=precision,
        rounding=rounding,
        round_off_account=str(round_off_account),
        round_off_limit=round_off_limit,
        balance_tolerance=balance_tolerance,
    )


def load_config(path: Path | None = None) -> AppConfig:
    """ledger.yaml 파일 로드

    Args:
        path: ledger.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.CONFIG_FILE

    if not path.exists():
        raise ConfigLoadError(f"ledger.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"ledger.yaml 파싱 실패: {e}") from e

    if data is None:
        raise ConfigLoadError("ledger.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise ConfigLoadError("ledger.yaml 최상위는 매핑이어야 합니다")

    database = data.get("database") or {}
    db_path = Path(database.get("path", Paths.LEDGER_DB))
    if not db_path.is_absolute():
        # 상대 경로는 설정 파일 위치가 아닌 프로젝트 루트 기준
        db_path = Paths.CONFIG_DIR.parent / db_path

    web = data.get("web") or {}

    return AppConfig(
        db_path=db_path,
        ledger=parse_ledger_config(data.get("ledger") or {}),
        web=WebConfig(
            host=str(web.get("host", Defaults.WEB_HOST)),
            port=int(web.get("port", Defaults.WEB_PORT)),
        ),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    ledger.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, config_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(config_path)

    @property
    def db_path(self) -> Path:
        """Ledger DB 경로"""
        assert self._config is not None
        return self._config.db_path

    @property
    def ledger(self) -> LedgerConfig:
        """Posting/Report용 설정"""
        assert self._config is not None
        return self._config.ledger

    @property
    def web(self) -> WebConfig:
        """Web 서버 설정"""
        assert self._config is not None
        return self._config.web

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(config_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환"""
    return Settings(config_path)
