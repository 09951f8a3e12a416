"""
Money 값 타입

정수 단위(units) + 소수점 자리수(scale)로 표현하는 고정 소수점 금액.
float 오차 없이 정확한 산술만 허용하고, 자리수 손실은 반올림 모드를
명시한 경우에만 발생.

예: Money.of("12.34") → units=1234, scale=2
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation
from functools import total_ordering
from typing import Iterable, Union

from core.constants import Defaults
from core.ledger.errors import InvalidScale

Numeric = Union[Decimal, int, str]


def _to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("bool은 금액으로 사용할 수 없습니다")
    if isinstance(value, float):
        # float는 표현 오차가 있으므로 문자열 경유
        value = repr(value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidScale(f"Not a decimal literal: {value!r}") from e
    if not result.is_finite():
        raise InvalidScale(f"Non-finite amount: {value!r}")
    return result


def _to_units(value: Decimal, scale: int, rounding: str | None) -> int:
    """Decimal을 10^-scale 단위 정수로 변환

    정수 연산으로 처리하여 Decimal context 정밀도의 영향을 받지 않음.
    """
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    shift = exponent + scale

    if shift >= 0:
        units = coefficient * 10 ** shift
    else:
        units, remainder = divmod(coefficient, 10 ** -shift)
        if remainder:
            if rounding is None:
                raise InvalidScale(
                    f"{value} has more than {scale} fractional digits"
                )
            context = Context(prec=len(digits) + scale + 2, rounding=rounding)
            quantized = value.quantize(Decimal(1).scaleb(-scale), context=context)
            return _to_units(quantized, scale, None)

    return -units if sign else units


@total_ordering
@dataclass(frozen=True, eq=False)
class Money:
    """고정 소수점 금액 (불변)

    서로 다른 scale 간 연산은 큰 scale로 손실 없이 맞춘 뒤 계산.
    비교/해시는 값 기준 (1.0 == 1.00).

    Attributes:
        units: 10^-scale 단위 정수 값 (부호 포함)
        scale: 소수점 자리수
    """

    units: int
    scale: int = Defaults.PRECISION

    def __post_init__(self) -> None:
        if self.scale < 0:
            raise InvalidScale(f"Scale must be non-negative: {self.scale}")

    # -------------------------------------------------------------------------
    # 생성
    # -------------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        value: Numeric | Money,
        scale: int = Defaults.PRECISION,
        rounding: str | None = None,
    ) -> Money:
        """Decimal/문자열/정수에서 생성

        Args:
            value: 금액 리터럴
            scale: 소수점 자리수
            rounding: decimal 반올림 모드 (None이면 자리수 초과 시 예외)

        Raises:
            InvalidScale: 자리수 초과 (rounding 미지정) 또는 유효하지 않은 값
        """
        if isinstance(value, Money):
            return value.rescale(scale, rounding)
        return cls(_to_units(_to_decimal(value), scale, rounding), scale)

    @classmethod
    def from_units(cls, units: int, scale: int = Defaults.PRECISION) -> Money:
        return cls(int(units), scale)

    @classmethod
    def zero(cls, scale: int = Defaults.PRECISION) -> Money:
        return cls(0, scale)

    @classmethod
    def total(cls, amounts: Iterable[Money], scale: int = Defaults.PRECISION) -> Money:
        """합계 (빈 목록이면 0)"""
        result = cls.zero(scale)
        for amount in amounts:
            result = result + amount
        return result

    # -------------------------------------------------------------------------
    # 변환
    # -------------------------------------------------------------------------

    def to_decimal(self) -> Decimal:
        digits = tuple(int(d) for d in str(abs(self.units)))
        return Decimal((1 if self.units < 0 else 0, digits, -self.scale))

    def rescale(self, scale: int, rounding: str | None = None) -> Money:
        """자리수 변경 (축소는 정확하거나 rounding 지정 시에만)"""
        if scale == self.scale:
            return self
        if scale > self.scale:
            return Money(self.units * 10 ** (scale - self.scale), scale)
        return Money(_to_units(self.to_decimal(), scale, rounding), scale)

    def _align(self, other: Money) -> tuple[int, int, int]:
        if not isinstance(other, Money):
            raise TypeError(f"Money와 연산할 수 없는 타입: {type(other).__name__}")
        scale = max(self.scale, other.scale)
        return (
            self.units * 10 ** (scale - self.scale),
            other.units * 10 ** (scale - other.scale),
            scale,
        )

    # -------------------------------------------------------------------------
    # 산술
    # -------------------------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        left, right, scale = self._align(other)
        return Money(left + right, scale)

    def __sub__(self, other: Money) -> Money:
        left, right, scale = self._align(other)
        return Money(left - right, scale)

    def multiply(self, factor: Numeric, rounding: str | None = None) -> Money:
        """스칼라 곱 (같은 scale 유지)

        Raises:
            InvalidScale: 정확한 곱이 scale을 초과하고 rounding 미지정
        """
        factor_dec = _to_decimal(factor)
        # n자리 * m자리 곱은 최대 n+m자리이므로 정밀도 손실 없음
        context = Context(
            prec=len(str(abs(self.units))) + len(factor_dec.as_tuple().digits) + 2
        )
        product = context.multiply(Decimal(self.units), factor_dec)
        return Money(_to_units(product, 0, rounding), self.scale)

    def __mul__(self, factor: Numeric) -> Money:
        if isinstance(factor, Money):
            return NotImplemented
        return self.multiply(factor)

    __rmul__ = __mul__

    def __neg__(self) -> Money:
        return Money(-self.units, self.scale)

    def __abs__(self) -> Money:
        return Money(abs(self.units), self.scale)

    # -------------------------------------------------------------------------
    # 부호/비교
    # -------------------------------------------------------------------------

    def is_zero(self) -> bool:
        return self.units == 0

    def is_positive(self) -> bool:
        return self.units > 0

    def is_negative(self) -> bool:
        return self.units < 0

    @property
    def sign(self) -> int:
        return (self.units > 0) - (self.units < 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        left, right, _ = self._align(other)
        return left == right

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        left, right, _ = self._align(other)
        return left < right

    def __hash__(self) -> int:
        return hash(self.to_decimal().normalize()) if self.units else hash(0)

    def __bool__(self) -> bool:
        return self.units != 0

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f"Money('{self}')"
