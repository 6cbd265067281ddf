"""Invoice generation - product selection, formatting and PDF rendering."""

from .catalog import PRODUCTS
from .formatting import amount_in_words, format_inr
from .selector import select_products_for_invoice
from .pdf import build_invoice, render_invoice_pdf

__all__ = [
    "PRODUCTS",
    "amount_in_words",
    "format_inr",
    "select_products_for_invoice",
    "build_invoice",
    "render_invoice_pdf",
]
