"""
Money 값 타입 테스트

정확한 변환, 자리수 검증, 산술, 비교
"""

from decimal import Decimal

import pytest

from core.ledger.errors import InvalidScale
from core.ledger.money import Money


class TestMoneyOf:
    """Money.of 생성 테스트"""

    def test_from_string(self) -> None:
        """문자열 리터럴"""
        money = Money.of("12.34")

        assert money.units == 1234
        assert money.scale == 2

    def test_from_decimal_and_int(self) -> None:
        """Decimal / 정수"""
        assert Money.of(Decimal("0.5")).units == 50
        assert Money.of(7).units == 700

    def test_negative(self) -> None:
        """음수"""
        assert Money.of("-3.10").units == -310

    def test_excess_digits_rejected(self) -> None:
        """자리수 초과 (반올림 미지정) → InvalidScale"""
        with pytest.raises(InvalidScale):
            Money.of("0.005")

    def test_trailing_zeros_accepted(self) -> None:
        """0으로 끝나는 추가 자리수는 손실이 없으므로 허용"""
        assert Money.of("1.2300").units == 123

    def test_rounding_mode(self) -> None:
        """반올림 모드 명시"""
        assert Money.of("0.005", rounding="ROUND_HALF_UP").units == 1
        assert Money.of("0.005", rounding="ROUND_HALF_EVEN").units == 0
        assert Money.of("-0.005", rounding="ROUND_HALF_UP").units == -1

    def test_invalid_literal(self) -> None:
        """유효하지 않은 리터럴"""
        with pytest.raises(InvalidScale):
            Money.of("abc")
        with pytest.raises(InvalidScale):
            Money.of("NaN")

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            Money.of(True)  # type: ignore

    def test_large_value_exact(self) -> None:
        """큰 값도 정확히 변환"""
        money = Money.of("123456789012345678901234567890.12")

        assert str(money) == "123456789012345678901234567890.12"

    def test_total(self) -> None:
        amounts = [Money.of("1.10"), Money.of("2.20"), Money.of("3.30")]

        assert Money.total(amounts) == Money.of("6.60")
        assert Money.total([]) == Money.zero()


class TestMoneyArithmetic:
    """산술 테스트"""

    def test_add_sub(self) -> None:
        assert Money.of("0.10") + Money.of("0.20") == Money.of("0.30")
        assert Money.of("1.00") - Money.of("2.50") == Money.of("-1.50")

    def test_mixed_scale(self) -> None:
        """다른 scale은 큰 쪽으로 맞춤"""
        result = Money.of("1.5", 1) + Money.of("0.25", 2)

        assert result.scale == 2
        assert result.units == 175

    def test_add_non_money(self) -> None:
        with pytest.raises(TypeError):
            Money.of("1.00") + 1  # type: ignore

    def test_multiply_exact(self) -> None:
        assert Money.of("10.00").multiply(3) == Money.of("30.00")
        assert Money.of("1000.00").multiply(Decimal("0.12")) == Money.of("120.00")

    def test_multiply_needs_rounding(self) -> None:
        """정확한 곱이 자리수를 넘으면 rounding 필요"""
        with pytest.raises(InvalidScale):
            Money.of("33.33").multiply(Decimal("0.12"))

        assert Money.of("33.33").multiply(Decimal("0.12"), "ROUND_HALF_UP") == Money.of("4.00")

    def test_operator_mul(self) -> None:
        assert Money.of("2.50") * 2 == Money.of("5.00")
        assert 2 * Money.of("2.50") == Money.of("5.00")

    def test_neg_abs(self) -> None:
        assert -Money.of("1.00") == Money.of("-1.00")
        assert abs(Money.of("-1.00")) == Money.of("1.00")


class TestMoneyComparison:
    """비교/해시 테스트"""

    def test_value_equality_across_scales(self) -> None:
        assert Money.of("1.0", 1) == Money.of("1.00", 2)
        assert hash(Money.of("1.0", 1)) == hash(Money.of("1.00", 2))

    def test_ordering(self) -> None:
        assert Money.of("1.00") < Money.of("1.01")
        assert Money.of("2.00") >= Money.of("2")
        assert max(Money.of("3"), Money.of("-5")) == Money.of("3")

    def test_sign(self) -> None:
        assert Money.of("-0.01").sign == -1
        assert Money.zero().sign == 0
        assert Money.of("0.01").is_positive()
        assert not Money.zero()

    def test_str_and_decimal(self) -> None:
        assert str(Money.of("-0.05")) == "-0.05"
        assert Money.of("12.30").to_decimal() == Decimal("12.30")
        assert repr(Money.of("1")) == "Money('1.00')"

    def test_rescale(self) -> None:
        assert Money.of("1.25").rescale(4).units == 12500
        assert Money.of("1.20").rescale(1).units == 12
        with pytest.raises(InvalidScale):
            Money.of("1.25").rescale(1)
        assert Money.of("1.25").rescale(1, "ROUND_HALF_UP").units == 13
