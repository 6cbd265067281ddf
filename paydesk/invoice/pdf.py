"""Tax invoice PDF rendering with reportlab."""

from io import BytesIO

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from paydesk.config import InvoiceConfig, settings
from paydesk.invoice.formatting import amount_in_words, format_inr
from paydesk.invoice.selector import select_products_for_invoice
from paydesk.models.invoice import InvoiceData
from paydesk.models.transaction import Transaction
from paydesk.utils.logging import get_logger

logger = get_logger("paydesk.invoice", settings.log_level)

MARGIN = 30
ROW_HEIGHT = 30
HEADER_ROW_HEIGHT = 28
FOOTER_HEIGHT = 60
TOTALS_HEIGHT = 180

BLACK = HexColor("#000000")
WHITE = HexColor("#FFFFFF")
INK = HexColor("#1E293B")
MUTED = HexColor("#475569")
LABEL = HexColor("#64748B")
BORDER = HexColor("#E2E8F0")
PANEL = HexColor("#F1F5F9")
DARK = HexColor("#0F172A")
RED = HexColor("#DC2626")
PALE = HexColor("#CBD5E1")

# Fixed column widths; the product name column takes the rest
SNO_WIDTH, CATEGORY_WIDTH, PRICE_WIDTH = 30, 180, 120


def _fit(text: str, font: str, size: float, width: float) -> str:
    """Truncate text with an ellipsis so it fits in ``width`` points."""
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


class InvoiceRenderer:
    """Draws one invoice onto a reportlab canvas.

    Positions are given from the top of the page, like the layout they
    were designed in; ``_y`` converts them to reportlab's bottom-up axis.
    """

    def __init__(self, transaction: Transaction, invoice: InvoiceData, company: InvoiceConfig):
        self.transaction = transaction
        self.invoice = invoice
        self.company = company
        self.buffer = BytesIO()
        self.width, self.height = A4
        self.content_width = self.width - MARGIN * 2
        self.columns = (
            SNO_WIDTH,
            self.content_width - SNO_WIDTH - CATEGORY_WIDTH - PRICE_WIDTH,
            CATEGORY_WIDTH,
            PRICE_WIDTH,
        )
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        self.canvas.setTitle(f"Invoice {transaction.transaction_id}")
        self.canvas.setAuthor(company.company_name)
        self.canvas.setSubject("Transaction Invoice")

    def _y(self, top: float, size: float = 0) -> float:
        return self.height - top - size

    def _text(
        self,
        x: float,
        top: float,
        text: str,
        size: float = 8,
        font: str = "Helvetica",
        color=MUTED,
        align: str = "left",
        width: float | None = None,
    ):
        c = self.canvas
        c.setFont(font, size)
        c.setFillColor(color)
        if width is not None:
            text = _fit(text, font, size, width)
        baseline = self._y(top, size)
        if align == "right":
            c.drawRightString(x + (width or 0), baseline, text)
        else:
            c.drawString(x, baseline, text)

    def _box(self, x: float, top: float, w: float, h: float, fill=PANEL, stroke=BORDER):
        c = self.canvas
        c.setFillColor(fill)
        if stroke is not None:
            c.setStrokeColor(stroke)
            c.setLineWidth(1)
        c.rect(x, self._y(top, h), w, h, fill=1, stroke=1 if stroke is not None else 0)

    def _rule(self, top: float, width: float = 0.5):
        c = self.canvas
        c.setStrokeColor(BORDER)
        c.setLineWidth(width)
        c.line(MARGIN, self._y(top), self.width - MARGIN, self._y(top))

    def _header(self) -> float:
        """Company block on the left, TAX INVOICE box on the right."""
        company = self.company
        top = MARGIN
        self._text(MARGIN, top, company.company_name, size=18, font="Helvetica-Bold", color=BLACK)

        line_top = top + 22
        for line in company.company_address:
            self._text(MARGIN, line_top, line)
            line_top += 11
        if company.company_cin:
            self._text(MARGIN, line_top, f"CIN: {company.company_cin}")
            line_top += 15
        self._text(MARGIN, line_top, company.company_phone)
        self._text(MARGIN, line_top + 11, company.company_email)

        box_w, box_h = 180, 85
        box_x = self.width - MARGIN - box_w
        self._box(box_x, top, box_w, box_h)
        self._text(box_x + 10, top + 10, "TAX INVOICE", size=9, font="Helvetica-Bold", color=LABEL)
        self._text(
            box_x + 10, top + 24, self.transaction.transaction_id,
            font="Helvetica-Bold", color=BLACK, width=box_w - 20,
        )
        self._text(box_x + 10, top + 45, "Invoice Date:")
        when = self.transaction.invoice_date
        self._text(
            box_x + 10, top + 57, when.strftime("%d %b %Y") if when else "N/A",
            font="Helvetica-Bold", color=BLACK,
        )
        return max(top + box_h, line_top + 11) + 30

    def _bill_to(self, top: float) -> float:
        txn = self.transaction
        self._text(MARGIN, top, "Bill To", color=LABEL)
        y = top + 12
        self._text(
            MARGIN, y, txn.customer_name or "Customer Name",
            size=11, font="Helvetica-Bold", color=BLACK,
        )
        y += 16
        for line in (txn.customer_email, txn.customer_phone):
            if line:
                self._text(MARGIN, y, line, size=9)
                y += 12
        return y

    def _summary(self, top: float) -> float:
        invoice = self.invoice
        box_w = 200
        box_h = 64 if invoice.discount > 0 else 50
        box_x = self.width - MARGIN - box_w
        self._box(box_x, top, box_w, box_h, fill=WHITE)

        rows = [("Sub Total", format_inr(invoice.subtotal), INK)]
        if invoice.discount > 0:
            rows.append(("Discount", f"-{format_inr(invoice.discount)}", RED))
        rows.append(("Tax", format_inr(0), INK))

        y = top + 12
        for label, value, color in rows:
            self._text(box_x + 10, y, label)
            self._text(box_x + 100, y, value, font="Helvetica-Bold", color=color, align="right", width=90)
            y += 14
        return top + box_h

    def _table_header(self, top: float) -> float:
        sno, name, category, price = self.columns
        self._box(MARGIN, top, self.content_width, HEADER_ROW_HEIGHT, stroke=None)
        y = top + 10
        self._text(MARGIN + 8, y, "#", font="Helvetica-Bold")
        self._text(MARGIN + sno + 13, y, "Product Name", font="Helvetica-Bold")
        self._text(MARGIN + sno + name + 3, y, "Category", font="Helvetica-Bold")
        self._text(
            MARGIN + sno + name + category - 10, y, "Price",
            font="Helvetica-Bold", align="right", width=price,
        )
        return top + HEADER_ROW_HEIGHT

    def _footer(self):
        company = self.company
        top = self.height - MARGIN - 50
        self._rule(top, width=1)
        self._text(MARGIN, top + 10, company.company_name, size=7, font="Helvetica-Bold", color=LABEL)
        self._text(MARGIN, top + 20, ", ".join(company.company_address[:3]), size=7, color=LABEL)
        self._text(
            self.width - MARGIN - 200, top + 20,
            f"{company.company_phone} | {company.company_email}",
            size=7, color=LABEL, align="right", width=200,
        )

    def _new_page(self) -> float:
        self._footer()
        self.canvas.showPage()
        return MARGIN

    def _items(self, top: float) -> float:
        """Items table, continued on new pages as needed."""
        sno, name, category, price = self.columns
        bottom_limit = self.height - MARGIN - FOOTER_HEIGHT
        y = self._table_header(top)

        for index, line in enumerate(self.invoice.products, start=1):
            if y + ROW_HEIGHT > bottom_limit:
                self._rule(y)
                y = self._table_header(self._new_page())
            self._rule(y)
            row_top = y + 10
            self._text(MARGIN + 8, row_top, str(index), color=INK)
            label = line.name.strip() or f"Product {index}"
            if line.quantity > 1:
                label = f"{label} x {line.quantity}"
            self._text(MARGIN + sno + 13, row_top, label, color=INK, width=name - 10)
            self._text(
                MARGIN + sno + name + 3, row_top, line.category or "Uncategorized",
                color=INK, width=category - 10,
            )
            self._text(
                MARGIN + sno + name + category - 10, row_top, format_inr(line.line_total),
                color=INK, align="right", width=price,
            )
            y += ROW_HEIGHT

        self._rule(y)
        return y

    def _totals(self, top: float):
        """Total in words and notes on the left, total box and signature on the right."""
        left_width = self.content_width / 2 - 15
        invoice = self.invoice

        self._text(MARGIN, top, "Total In Words", font="Helvetica-Bold")
        words = simpleSplit(amount_in_words(invoice.total), "Helvetica", 9, left_width)
        y = top + 12
        for line in words:
            self._text(MARGIN, y, line, size=9, color=INK)
            y += 11
        y = max(y, top + 47)

        self._text(MARGIN, y, "Notes")
        y += 12
        self._box(MARGIN, y, left_width, 50)
        self._text(MARGIN + 8, y + 8, self.company.notes, color=INK, width=left_width - 16)

        box_w, box_h = 250, 90
        box_x = self.width - MARGIN - box_w
        self._box(box_x, top, box_w, box_h, fill=DARK, stroke=None)
        self._text(box_x + 15, top + 12, "Total", color=BORDER)
        self._text(
            box_x + 15, top + 24, format_inr(invoice.total),
            size=22, font="Helvetica-Bold", color=WHITE, width=box_w - 30,
        )
        self._text(box_x + 15, top + 60, "Balance Due", size=7, color=PALE)
        self._text(
            box_x + 115, top + 60, format_inr(invoice.total),
            size=7, font="Helvetica-Bold", color=WHITE, align="right", width=120,
        )

        sign_top = top + box_h + 15
        self._text(box_x, sign_top, "Authorized Signature")
        self._box(box_x, sign_top + 12, 192, 40)

    def render(self) -> bytes:
        top = self._header()
        bill_end = self._bill_to(top)
        summary_end = self._summary(top)
        table_end = self._items(max(bill_end, summary_end) + 25)

        totals_top = table_end + 30
        if totals_top + TOTALS_HEIGHT > self.height - MARGIN - FOOTER_HEIGHT:
            totals_top = self._new_page()
        self._totals(totals_top)
        self._footer()

        self.canvas.save()
        return self.buffer.getvalue()


def render_invoice_pdf(
    transaction: Transaction,
    invoice_data: InvoiceData,
    company: InvoiceConfig | None = None,
) -> bytes:
    """Render an A4 tax invoice and return the PDF bytes.

    Args:
        transaction: The paid transaction being invoiced
        invoice_data: Line items from ``select_products_for_invoice``
        company: Seller details, defaults to ``settings.invoice``
    """
    company = company or settings.invoice
    pdf = InvoiceRenderer(transaction, invoice_data, company).render()
    logger.info(
        f"Rendered invoice for {transaction.transaction_id}: "
        f"{len(invoice_data.products)} lines, {len(pdf)} bytes"
    )
    return pdf


def build_invoice(
    transaction: Transaction,
    company: InvoiceConfig | None = None,
) -> tuple[InvoiceData, bytes]:
    """Itemize a transaction's amount and render it as a PDF."""
    invoice_data = select_products_for_invoice(transaction.amount)
    return invoice_data, render_invoice_pdf(transaction, invoice_data, company)
