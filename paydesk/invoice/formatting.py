"""Indian currency formatting for invoices."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from paydesk.fees import MAX_AMOUNT

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000


def _to_paise(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return None
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def group_indian(digits: str) -> str:
    """Insert Indian digit-group separators: 1234567 -> 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, last3 = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [last3])


def format_inr(value: Any) -> str:
    """Format an amount as ``Rs. 1,23,456.78``.

    None and values that are not numbers format as ``Rs. 0.00``.
    """
    amount = _to_paise(value)
    if amount is None:
        return "Rs. 0.00"
    sign = "-" if amount < 0 else ""
    rupees, paise = f"{abs(amount):.2f}".split(".")
    return f"Rs. {sign}{group_indian(rupees)}.{paise}"


def _two_digits(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens, ones = divmod(n, 10)
    return TENS[tens] + (f"-{ONES[ones]}" if ones else "")


def _three_digits(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    parts = []
    if hundreds:
        parts.append(f"{ONES[hundreds]} Hundred")
    if rest:
        parts.append(_two_digits(rest))
    return " ".join(parts)


def integer_to_words(n: int) -> str:
    """Spell a non-negative integer using crore, lakh and thousand."""
    if n == 0:
        return "Zero"

    parts = []
    crores, n = divmod(n, CRORE)
    if crores:
        parts.append(f"{integer_to_words(crores)} Crore")
    lakhs, n = divmod(n, LAKH)
    if lakhs:
        parts.append(f"{_two_digits(lakhs)} Lakh")
    thousands, n = divmod(n, 1000)
    if thousands:
        parts.append(f"{_two_digits(thousands)} Thousand")
    if n:
        parts.append(_three_digits(n))
    return " ".join(parts)


def amount_in_words(value: Any) -> str:
    """Spell out an amount for the "Total In Words" line.

    >>> amount_in_words("1234.50")
    'Indian Rupee One Thousand Two Hundred Thirty-Four and Fifty Paise Only'
    """
    amount = abs(_to_paise(value) or Decimal("0"))
    rupees = int(amount)
    paise = int((amount - rupees) * 100)

    words = f"Indian Rupee {integer_to_words(rupees)}"
    if paise:
        words += f" and {_two_digits(paise)} Paise"
    return f"{words} Only"
