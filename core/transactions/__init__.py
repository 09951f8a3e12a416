"""
거래 유형 (Ledger 외부 생산자)

각 거래는 build_posting(context)으로 정확히 하나의 Posting을 생성.
TransactionController는 이 능력(Postable)에 대해서만 동작한다.
"""

from core.transactions.invoice import InvoiceItem, InvoiceTotals, TaxLine, compute_totals
from core.transactions.journal_entry import JournalEntry, JournalEntryLine
from core.transactions.payment import Payment, PaymentReference, PaymentType
from core.transactions.purchase_invoice import PurchaseInvoice
from core.transactions.sales_invoice import SalesInvoice

__all__ = [
    "SalesInvoice",
    "PurchaseInvoice",
    "Payment",
    "PaymentType",
    "PaymentReference",
    "JournalEntry",
    "JournalEntryLine",
    "InvoiceItem",
    "TaxLine",
    "InvoiceTotals",
    "compute_totals",
]
