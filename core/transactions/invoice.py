"""
Invoice 공통 계산

품목 금액, 세금, 할인, 총액 계산.

세금은 품목별로 반올림한 값을 세금 계정에 기록하고, 총액은 순액 기준으로
한 번 반올림한 세금을 사용한다. 둘의 차이(보통 1센트)는 Posting의
round-off로 흡수.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from core.ledger.money import Money
from core.ledger.posting import LedgerContext


@dataclass(frozen=True)
class InvoiceItem:
    """Invoice 품목

    Attributes:
        account: 수익(판매) 또는 비용(구매) 계정
        rate: 단가
        quantity: 수량
    """

    account: str
    rate: Decimal | str
    quantity: Decimal | str | int = 1
    description: str | None = None


@dataclass(frozen=True)
class TaxLine:
    """세금 라인

    Attributes:
        account: 세금 계정 (매출: Output Tax, 매입: Input Tax)
        rate: 세율 (%)
    """

    account: str
    rate: Decimal | str


@dataclass
class InvoiceTotals:
    item_amounts: list[Money]
    net_total: Money
    tax_amounts: list[Money]  # TaxLine 순서, 품목별 반올림 합계
    total_tax: Money  # 순액 기준 세금 (총액 계산용)
    discount: Money
    grand_total: Money
    tax_rates: list[Decimal] = field(default_factory=list)


def compute_totals(
    context: LedgerContext,
    items: list[InvoiceItem],
    taxes: list[TaxLine],
    discount_amount: Decimal | str | int = 0,
) -> InvoiceTotals:
    """Invoice 금액 계산

    Raises:
        ValueError: 품목 없음, 음수 세율, 총액이 음수
    """
    if not items:
        raise ValueError("Invoice에 품목이 없습니다")

    rounding = context.config.rounding
    zero = context.money(0)

    item_amounts = [
        Money.of(
            Decimal(str(item.rate)) * Decimal(str(item.quantity)),
            context.config.precision,
            rounding,
        )
        for item in items
    ]
    net_total = sum(item_amounts, zero)

    tax_rates = [Decimal(str(tax.rate)) for tax in taxes]
    if any(rate < 0 for rate in tax_rates):
        raise ValueError("세율은 음수일 수 없습니다")

    tax_amounts = [
        sum(
            (amount.multiply(rate / 100, rounding) for amount in item_amounts),
            zero,
        )
        for rate in tax_rates
    ]
    total_tax = net_total.multiply(sum(tax_rates, Decimal(0)) / 100, rounding)

    discount = Money.of(discount_amount, context.config.precision, rounding)
    grand_total = net_total + total_tax - discount
    if discount.is_negative() or grand_total.is_negative():
        raise ValueError(f"할인 금액이 유효하지 않습니다: {discount}")

    return InvoiceTotals(
        item_amounts=item_amounts,
        net_total=net_total,
        tax_amounts=tax_amounts,
        total_tax=total_tax,
        discount=discount,
        grand_total=grand_total,
        tax_rates=tax_rates,
    )
