"""
Sales Invoice (매출 송장)

Posting:
- 차변 Debtors: 총액 (거래처)
- 대변 품목별 수익 계정: 품목 금액
- 대변 세금 계정: 품목별 반올림 세금 합계
- 차변 할인 계정: 할인 금액
- 잔차는 Round Off
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar

from core.domain.state_machines import DocStatus
from core.ledger.posting import LedgerContext, Posting
from core.ledger.types import ReferenceType
from core.transactions.invoice import InvoiceItem, InvoiceTotals, TaxLine, compute_totals


@dataclass
class SalesInvoice:
    """매출 송장

    Attributes:
        name: 송장 번호 (예: SINV-0001)
        date: 전기일
        party: 고객
        items: 품목 목록
        taxes: 세금 목록
        discount_amount: 송장 단위 할인 금액
        debit_to: 매출채권 계정
        discount_account: 매출 할인 계정
    """

    reference_type: ClassVar[str] = ReferenceType.SALES_INVOICE.value

    name: str
    date: date
    party: str
    items: list[InvoiceItem]
    taxes: list[TaxLine] = field(default_factory=list)
    discount_amount: Decimal | str | int = 0
    debit_to: str = "Debtors"
    discount_account: str = "Discount Allowed"
    status: DocStatus = DocStatus.DRAFT

    def totals(self, context: LedgerContext) -> InvoiceTotals:
        return compute_totals(context, self.items, self.taxes, self.discount_amount)

    def build_posting(self, context: LedgerContext) -> Posting:
        totals = self.totals(context)
        posting = context.new_posting(self.reference_type, self.name, self.date)

        posting.debit(self.debit_to, totals.grand_total, party=self.party)

        for item, amount in zip(self.items, totals.item_amounts):
            posting.credit(item.account, amount, memo=item.description)

        for tax, amount in zip(self.taxes, totals.tax_amounts):
            posting.credit(tax.account, amount)

        if totals.discount:
            posting.debit(self.discount_account, totals.discount)

        posting.apply_round_off()
        return posting
