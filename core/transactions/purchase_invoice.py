"""
Purchase Invoice (매입 송장)

Sales Invoice의 대칭:
- 대변 Creditors: 총액 (공급처)
- 차변 품목별 비용 계정, 차변 세금 계정 (Input Tax)
- 대변 할인 계정 (Discount Received)
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
class PurchaseInvoice:
    """매입 송장"""

    reference_type: ClassVar[str] = ReferenceType.PURCHASE_INVOICE.value

    name: str
    date: date
    party: str
    items: list[InvoiceItem]
    taxes: list[TaxLine] = field(default_factory=list)
    discount_amount: Decimal | str | int = 0
    credit_to: str = "Creditors"
    discount_account: str = "Discount Received"
    status: DocStatus = DocStatus.DRAFT

    def totals(self, context: LedgerContext) -> InvoiceTotals:
        return compute_totals(context, self.items, self.taxes, self.discount_amount)

    def build_posting(self, context: LedgerContext) -> Posting:
        totals = self.totals(context)
        posting = context.new_posting(self.reference_type, self.name, self.date)

        posting.credit(self.credit_to, totals.grand_total, party=self.party)

        for item, amount in zip(self.items, totals.item_amounts):
            posting.debit(item.account, amount, memo=item.description)

        for tax, amount in zip(self.taxes, totals.tax_amounts):
            posting.debit(tax.account, amount)

        if totals.discount:
            posting.credit(self.discount_account, totals.discount)

        posting.apply_round_off()
        return posting
