"""Pick catalog products that itemize a paid amount.

The gateway only knows the amount a customer paid, so the invoice lists
catalog products adding up to at least that amount and a discount
absorbing the difference.
"""

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from paydesk.config import settings
from paydesk.fees import PAISE, to_amount
from paydesk.invoice.catalog import PRODUCTS
from paydesk.models.invoice import InvoiceData, InvoiceLine, Product
from paydesk.utils.logging import get_logger

logger = get_logger("paydesk.invoice", settings.log_level)

MAX_QUANTITY_PER_LINE = 3
OVERSHOOT_LIMIT = Decimal("1.5")
LINE_TOLERANCE = Decimal("1.2")


def _line(product: Product, quantity: int) -> InvoiceLine:
    return InvoiceLine(
        name=product.name,
        category=product.category,
        price=product.price,
        quantity=quantity,
    )


def target_line_count(amount: Decimal, max_lines: int | None = None) -> int:
    """Roughly ten lines per 1000 of amount, at least one."""
    if max_lines is None:
        max_lines = settings.invoice.max_line_items
    count = max(1, int(amount * 10 // 1000))
    return min(count, max_lines) if max_lines else count


def select_products_for_invoice(
    transaction_amount: Any,
    catalog: Iterable[Product] = PRODUCTS,
    max_lines: int | None = None,
) -> InvoiceData:
    """Build invoice lines whose subtotal minus discount equals the amount.

    Args:
        transaction_amount: Amount the customer paid
        catalog: Products to choose from
        max_lines: Cap on the number of lines, defaults to
            ``settings.invoice.max_line_items``

    Returns:
        InvoiceData with ``total == transaction_amount``

    Raises:
        ValueError: If the amount is not positive or the catalog has no
            product with a positive price
    """
    amount = to_amount(transaction_amount).quantize(PAISE, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValueError("Invoice amount must be greater than 0")

    ordered = sorted((p for p in catalog if p.price > 0), key=lambda p: p.price)
    if not ordered:
        raise ValueError("No valid products available for invoice generation")

    target = target_line_count(amount, max_lines)
    lines: list[InvoiceLine] = []
    current = Decimal("0")
    index = 0

    while len(lines) < target and current < amount * OVERSHOOT_LIMIT:
        product = ordered[index % len(ordered)]
        remaining = amount - current
        slots = target - len(lines)

        quantity = 1
        if slots > 1:
            ideal = remaining / slots
            if product.price <= ideal:
                quantity = max(1, min(
                    int(ideal // product.price),
                    int(remaining // product.price),
                    MAX_QUANTITY_PER_LINE,
                ))
        else:
            quantity = max(1, int(remaining // product.price))

        if product.price * quantity > remaining * LINE_TOLERANCE and lines:
            quantity = 1

        lines.append(_line(product, quantity))
        current += product.price * quantity

        index += 1
        if index > len(ordered) * 2:
            break

    while len(lines) < target:
        lines.append(_line(ordered[0], 1))
        current += ordered[0].price

    subtotal = sum((line.line_total for line in lines), Decimal("0"))

    # Top up with the priciest product so the discount is never negative
    if subtotal < amount:
        top = ordered[-1]
        units = int(((amount - subtotal) / top.price).to_integral_value(rounding=ROUND_CEILING))
        lines.append(_line(top, units))
        subtotal += top.price * units
        logger.debug(f"Invoice topped up with {units} x {top.name}")

    discount = subtotal - amount
    percentage = (discount / subtotal * 100).quantize(PAISE, rounding=ROUND_HALF_UP)

    return InvoiceData(
        products=lines,
        subtotal=subtotal,
        discount=discount,
        discount_percentage=percentage,
        total=subtotal - discount,
    )
