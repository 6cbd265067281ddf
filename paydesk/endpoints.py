"""Gateway API endpoint paths, relative to ``settings.api_base_url``."""

from urllib.parse import quote


def _seg(value: str) -> str:
    return quote(str(value), safe="")


# ============ AUTH ============
LOGIN = "/auth/login"
SIGNUP = "/auth/signup"
PROFILE = "/auth/profile"

# ============ API KEYS ============
CREATE_API_KEY = "/create"
GET_API_KEY = "/get"

# ============ MERCHANT (JWT) ============
SEARCH_TRANSACTIONS = "/payments/merchant/transactions/search"
SEARCH_PAYOUTS = "/payments/merchant/payouts/search"
TRANSACTION_REPORT = "/payments/merchant/transaction/report"
PAYOUT_REPORT = "/payments/merchant/payout/report"
COMBINED_REPORT = "/payments/merchant/report/combined"
PAYOUTS = "/payments/merchant/payouts"
PAYOUT_REQUEST = "/payments/merchant/payout/request"
BALANCE = "/payments/merchant/balance"


def transaction_detail(transaction_id: str) -> str:
    return f"/payments/merchant/transactions/{_seg(transaction_id)}"


def payout_cancel(payout_id: str) -> str:
    return f"/payments/merchant/payout/{_seg(payout_id)}/cancel"


def payout_status(payout_id: str) -> str:
    return f"/payments/merchant/payout/{_seg(payout_id)}/status"


# ============ PAYMENTS (API key) ============
TRANSACTIONS = "/payments/transactions"
CREATE_LINK = "/payments/create-payment-link"
AVAILABLE_GATEWAYS = "/payments/available-gateways"


def payment_status(order_id: str) -> str:
    return f"/payments/status/{_seg(order_id)}"


def refund(order_id: str) -> str:
    return f"/payments/refund/{_seg(order_id)}"


# ============ WEBHOOKS ============
WEBHOOK_ALL_CONFIG = "/payments/merchant/webhook/all/config"
WEBHOOK_CONFIGURE = "/payments/merchant/webhook/configure"
WEBHOOK_CONFIG = "/payments/merchant/webhook/config"
WEBHOOK_TEST = "/payments/merchant/webhook/test"
WEBHOOK_DELETE = "/payments/merchant/webhook"

PAYOUT_WEBHOOK_CONFIGURE = "/payments/merchant/webhook/payout/configure"
PAYOUT_WEBHOOK_UPDATE = "/payments/merchant/webhook/payout"
PAYOUT_WEBHOOK_CONFIG = "/payments/merchant/webhook/payout/config"
PAYOUT_WEBHOOK_TEST = "/payments/merchant/webhook/payout/test"
PAYOUT_WEBHOOK_DELETE = "/payments/merchant/webhook/payout"

# ============ SUPERADMIN ============
DASHBOARD_STATS = "/superadmin/dashboard/stats"
PAYMENT_GATEWAY_SETTINGS = "/superadmin/settings/payment-gateways"
MERCHANTS_COMPREHENSIVE = "/superadmin/merchants/comprehensive"
MANUAL_SETTLEMENT = "/superadmin/manual-settlement"


def superadmin_user(user_id: str) -> str:
    return f"/superadmin/users/{_seg(user_id)}"


def superadmin_user_password(user_id: str) -> str:
    return f"/superadmin/users/{_seg(user_id)}/password"


def superadmin_block_funds(merchant_id: str) -> str:
    return f"/superadmin/merchants/{_seg(merchant_id)}/block-funds"


# ============ ADMIN PAYOUTS / TRANSACTIONS ============
ADMIN_PAYOUTS = "/payments/admin/payouts/all"
ADMIN_TRANSACTIONS = "/payments/admin/transactions"


def admin_payout(payout_id: str, action: str) -> str:
    """approve, reject, process or details."""
    return f"/payments/admin/payout/{_seg(payout_id)}/{action}"


def admin_transaction(transaction_id: str, action: str | None = None) -> str:
    """settle or status; no action addresses the transaction itself."""
    path = f"/payments/admin/transactions/{_seg(transaction_id)}"
    return f"{path}/{action}" if action else path
