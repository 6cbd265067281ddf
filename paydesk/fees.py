"""Client-side payout fee calculation.

The gateway charges payouts in tiers:

* below 500: free while the merchant has free payouts left, otherwise a
  small flat charge
* 500 to 1000 inclusive: a flat fee
* above 1000: a percentage of the amount

The fee is shown to the merchant before the request is submitted; the
gateway computes the authoritative figure on its side.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, NamedTuple

from paydesk.config import FeeConfig, settings

PAISE = Decimal("0.01")
# Amounts at or beyond this are treated as junk input
MAX_AMOUNT = Decimal("1e15")


class PayoutCharge(NamedTuple):
    """Fee preview for a payout amount."""
    gross_amount: Decimal
    commission: Decimal
    net_amount: Decimal
    note: str
    warning: str

    @property
    def total_debit(self) -> Decimal:
        """What leaves the merchant balance: amount plus fee."""
        return self.gross_amount + self.commission


def to_amount(value: Any) -> Decimal:
    """Coerce user or API input to a Decimal amount.

    Junk, infinities and out-of-range magnitudes become 0.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return Decimal("0")
    return amount


def _rupees(value: Decimal) -> str:
    return f"₹{value.quantize(PAISE, rounding=ROUND_HALF_UP):,.2f}"


def compute_payout_charge(
    amount: Any,
    free_payouts_remaining: int | None,
    fees: FeeConfig | None = None,
) -> PayoutCharge:
    """Compute the fee, net amount and user-facing messages for a payout.

    Args:
        amount: Requested payout amount; non-numeric input counts as 0
        free_payouts_remaining: Free small payouts the merchant has left
        fees: Fee tiers, defaults to ``settings.fee_config``

    Returns:
        PayoutCharge with commission and net rounded half-up to paise
    """
    fees = fees or settings.fee_config
    gross = to_amount(amount)
    free_left = int(free_payouts_remaining or 0)

    commission = Decimal("0")
    note = ""

    if gross <= 0:
        pass
    elif gross < fees.small_txn_threshold:
        if free_left <= 0:
            commission = fees.small_txn_extra_charge
            note = (
                f"Since free payouts are exhausted, {_rupees(commission)} will be charged "
                f"for amounts below ₹{fees.small_txn_threshold:f}."
            )
    elif gross <= fees.flat_fee_ceiling:
        commission = fees.flat_fee_500_1000
        note = (
            f"Flat fee of {_rupees(commission)} applies for amounts between "
            f"₹{fees.small_txn_threshold:f} and ₹{fees.flat_fee_ceiling:f}."
        )
    else:
        commission = (gross * fees.percent_above_1000).quantize(PAISE, rounding=ROUND_HALF_UP)
        rate = (fees.percent_above_1000 * 100).normalize()
        note = (
            f"Fee of {rate:f}% applies for amounts above ₹{fees.flat_fee_ceiling:f} "
            f"({_rupees(commission)})."
        )

    commission = commission.quantize(PAISE, rounding=ROUND_HALF_UP)
    net = (gross - commission).quantize(PAISE, rounding=ROUND_HALF_UP)

    warning = ""
    if commission > 0:
        warning = (
            f"Payout will be created for {_rupees(gross + commission)} "
            f"({_rupees(gross)} + {_rupees(commission)} fee)."
        )

    return PayoutCharge(
        gross_amount=gross,
        commission=commission,
        net_amount=net,
        note=note,
        warning=warning,
    )
