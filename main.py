"""CLI entry point for the paydesk merchant and superadmin console."""

import argparse
import getpass
import sys
from pathlib import Path
from typing import Any

from paydesk.api import (
    ApiClient,
    ApiKeyService,
    AuthService,
    PaymentService,
    SuperadminService,
    WebhookService,
)
from paydesk.api.payments import parse_payouts, parse_transactions
from paydesk.api.superadmin import parse_merchants
from paydesk.config import settings
from paydesk.errors import PaydeskError
from paydesk.export import export_csv
from paydesk.fees import compute_payout_charge, to_amount
from paydesk.invoice import build_invoice, format_inr
from paydesk.models.payout import BeneficiaryDetails, PayoutRequest
from paydesk.utils.resilience import CircuitBreakerOpen
from paydesk.utils.session import get_current_session
from paydesk.validation import validate_payout_request


def print_header(title: str):
    print("=" * 60)
    print(title)
    print("=" * 60)


def print_fields(data: dict[str, Any]):
    """Print a single record as aligned ``key: value`` lines."""
    if not data:
        print("(empty)")
        return
    width = max(len(str(key)) for key in data)
    for key, value in data.items():
        print(f"  {str(key).ljust(width)} : {value}")


def print_table(rows: list[dict[str, Any]], empty_message: str = "No records found."):
    """Print records as a plain-text table using the first row's keys."""
    if not rows:
        print(empty_message)
        return
    headers = list(rows[0].keys())
    widths = {
        h: max(len(str(h)), *(len(str(row.get(h, ""))) for row in rows)) for h in headers
    }
    print("  ".join(str(h).upper().ljust(widths[h]) for h in headers))
    print("-" * (sum(widths.values()) + 2 * (len(headers) - 1)))
    for row in rows:
        print("  ".join(str(row.get(h, "")).ljust(widths[h]) for h in headers))


def print_pagination(data: dict[str, Any]):
    pagination = data.get("pagination") or {}
    if pagination:
        page = pagination.get("currentPage") or pagination.get("page")
        pages = pagination.get("totalPages") or pagination.get("pages")
        total = pagination.get("totalItems") or pagination.get("total")
        print(f"\nPage {page} of {pages} ({total} total)")


def confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N]: ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


class Console:
    """Services shared by the subcommands of one CLI invocation."""

    def __init__(self):
        self.client = ApiClient()
        self.auth = AuthService(self.client)
        self.api_keys = ApiKeyService(self.client)
        self.payments = PaymentService(self.client, self.api_keys)
        self.webhooks = WebhookService(self.client)
        self.superadmin = SuperadminService(self.client)


# ============ AUTH ============

def cmd_login(console: Console, args: argparse.Namespace):
    email = args.email or input("Email: ")
    password = args.password or getpass.getpass("Password: ")
    session = console.auth.login(email, password)
    print(f"Logged in as {session.email} ({session.role})")
    if session.business_name:
        print(f"Business: {session.business_name}")


def cmd_logout(console: Console, args: argparse.Namespace):
    console.auth.logout()
    print("Logged out.")


def cmd_whoami(console: Console, args: argparse.Namespace):
    session = get_current_session()
    if session is None:
        print("Not logged in.")
        return
    print_fields({
        "email": session.email or "N/A",
        "role": session.role,
        "business": session.business_name or "N/A",
        "user_id": session.user_id or "N/A",
    })
    if args.profile:
        print()
        profile = console.auth.get_profile()
        print_fields(profile.get("user") or profile)


# ============ MERCHANT ============

def cmd_balance(console: Console, args: argparse.Namespace):
    balance = console.payments.get_balance()
    print_header("Balance")
    print_fields(balance.to_display_dict())
    if balance.eligibility.reason:
        print(f"\n{balance.eligibility.reason}")


def _transaction_filters(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "page": args.page,
        "limit": args.limit,
        "status": args.status,
        "search": args.search,
        "startDate": args.start_date,
        "endDate": args.end_date,
        "paymentGateway": getattr(args, "gateway", None),
        "sortBy": getattr(args, "sort_by", None),
        "sortOrder": getattr(args, "sort_order", None),
    }


def _payout_filters(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "page": args.page,
        "limit": args.limit,
        "status": args.status,
        "startDate": args.start_date,
        "endDate": args.end_date,
    }


def cmd_transactions(console: Console, args: argparse.Namespace):
    if args.api_key:
        data = console.payments.get_transactions(
            page=args.page,
            limit=args.limit,
            status=args.status,
            search=args.search,
            start_date=args.start_date,
            end_date=args.end_date,
            payment_gateway=args.gateway,
            sort_by=args.sort_by,
            sort_order=args.sort_order,
        )
    else:
        data = console.payments.search_transactions(**_transaction_filters(args))
    transactions = parse_transactions(data)
    print_table([t.to_display_dict() for t in transactions], "No transactions found.")
    print_pagination(data)


def cmd_transaction(console: Console, args: argparse.Namespace):
    transaction = console.payments.get_transaction_detail(args.transaction_id)
    print_header(f"Transaction {transaction.transaction_id}")
    print_fields(transaction.to_display_dict())


def cmd_payouts(console: Console, args: argparse.Namespace):
    data = console.payments.get_payouts(**_payout_filters(args))
    payouts = parse_payouts(data)
    print_table([p.to_display_dict() for p in payouts], "No payouts found.")
    print_pagination(data)


def cmd_payout_fee(console: Console, args: argparse.Namespace):
    free = args.free
    if free is None:
        free = console.payments.get_balance().free_payouts_remaining
    charge = compute_payout_charge(args.amount, free)
    print_fields({
        "amount": format_inr(charge.gross_amount),
        "fee": format_inr(charge.commission),
        "net": format_inr(charge.net_amount),
        "total debit": format_inr(charge.total_debit),
    })
    if charge.note:
        print(f"\n{charge.note}")


def cmd_payout_request(console: Console, args: argparse.Namespace):
    request = PayoutRequest(
        amount=to_amount(args.amount),
        transfer_mode=args.mode,
        beneficiary_details=BeneficiaryDetails(
            upi_id=args.upi_id,
            account_number=args.account_number,
            ifsc_code=args.ifsc,
            account_holder_name=args.holder,
            bank_name=args.bank_name,
            branch_name=args.branch_name,
            wallet_address=args.wallet,
            network_name=args.network,
            currency_name=args.currency,
        ),
        notes=args.notes or "",
    )

    balance = console.payments.get_balance()
    charge = validate_payout_request(request, balance)

    if charge.note:
        print(charge.note)
    if charge.warning:
        print(charge.warning)
    if not args.yes and not confirm("Submit payout request?"):
        print("Cancelled.")
        return

    data = console.payments.request_payout(request, charge)
    print(data.get("message") or "Payout request submitted successfully!")


def cmd_payout_cancel(console: Console, args: argparse.Namespace):
    data = console.payments.cancel_payout(args.payout_id)
    print(data.get("message") or "Payout cancelled.")


def cmd_api_key(console: Console, args: argparse.Namespace):
    data = console.api_keys.create_api_key() if args.create else console.api_keys.get_api_key()
    key = data.get("apiKey") or data.get("key")
    print(f"API key: {key}" if key else data.get("message", "No API key returned."))


def cmd_payment_link(console: Console, args: argparse.Namespace):
    link = console.payments.create_payment_link(
        amount=args.amount,
        customer_name=args.name,
        customer_email=args.email,
        customer_phone=args.phone,
        description=args.description,
    )
    print(link["message"])
    print_fields({k: v for k, v in link.items() if k not in ("raw", "message") and v is not None})


def cmd_webhooks(console: Console, args: argparse.Namespace):
    hooks = console.webhooks
    payout = args.payout

    if args.action == "show":
        configs = hooks.get_all_webhook_configs()
        for label, key in (("Payment webhook", "payment_webhook"), ("Payout webhook", "payout_webhook")):
            print_header(label)
            config = configs[key]
            if config is None:
                print("Not configured.")
            else:
                print_fields(config.to_display_dict())
    elif args.action == "events":
        events = hooks.available_payout_events() if payout else hooks.available_events()
        print_table([e.model_dump() for e in events])
    elif args.action == "configure":
        if not args.url:
            raise PaydeskError("--url is required to configure a webhook")
        events = args.events or [
            e.id for e in (hooks.available_payout_events() if payout else hooks.available_events())
        ]
        if payout:
            data = hooks.configure_payout_webhook(args.url, events)
        else:
            data = hooks.configure_webhook(args.url, events)
        print(data.get("message") or "Webhook configured.")
        secret = data.get("webhook_secret")
        if secret:
            print(f"Webhook secret (store it now, it is not shown again): {secret}")
    elif args.action == "test":
        data = hooks.test_payout_webhook() if payout else hooks.test_webhook()
        print(data.get("message") or "Test webhook sent.")
    elif args.action == "delete":
        data = hooks.delete_payout_webhook() if payout else hooks.delete_webhook()
        print(data.get("message") or "Webhook deleted.")


def cmd_invoice(console: Console, args: argparse.Namespace):
    transaction = console.payments.get_transaction_detail(args.transaction_id)
    invoice, pdf = build_invoice(transaction)

    output = args.output or settings.exports_dir / f"invoice_{transaction.transaction_id}.pdf"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf)

    print_fields(invoice.to_display_dict())
    print(f"\nInvoice written to {output}")


def cmd_export(console: Console, args: argparse.Namespace):
    if args.kind == "transactions":
        data = console.payments.search_transactions(**_transaction_filters(args))
        records = [t.model_dump() for t in parse_transactions(data)]
    else:
        data = console.payments.get_payouts(**_payout_filters(args))
        records = [p.model_dump(exclude={"beneficiary_details"}) for p in parse_payouts(data)]

    path = export_csv(records, args.output, filename=f"{args.kind}.csv")
    print(f"Exported {len(records)} {args.kind} to {path}")


# ============ SUPERADMIN ============

def cmd_admin(console: Console, args: argparse.Namespace):
    admin = console.superadmin

    if args.action == "stats":
        print_header("Dashboard")
        print_fields(admin.get_dashboard_stats())
    elif args.action == "merchants":
        data = admin.get_all_merchants(
            merchant_id=args.merchant_id,
            status=args.status,
            include_inactive=args.include_inactive,
        )
        merchants = parse_merchants(data)
        if args.search:
            merchants = [m for m in merchants if m.matches_name(args.search)]
        print_table([m.to_display_dict() for m in merchants], "No merchants found.")
    elif args.action == "payouts":
        data = admin.get_all_payouts(
            page=args.page, limit=args.limit, status=args.status, merchantId=args.merchant_id
        )
        print_table([p.to_display_dict() for p in parse_payouts(data)], "No payouts found.")
        print_pagination(data)
    elif args.action == "approve":
        data = admin.approve_payout(args.target, args.notes or "")
        print(data.get("message") or "Payout approved.")
    elif args.action == "reject":
        data = admin.reject_payout(args.target, args.reason or "")
        print(data.get("message") or "Payout rejected.")
    elif args.action == "process":
        data = admin.process_payout(args.target, args.utr or "", args.notes or "", args.hash)
        print(data.get("message") or "Payout processed.")
    elif args.action == "settle":
        data = admin.settle_transaction(args.target)
        print(data.get("message") or "Transaction settled.")
    elif args.action == "settle-all":
        if not args.yes and not confirm("Run settlement for all eligible transactions?"):
            print("Cancelled.")
            return
        data = admin.trigger_manual_settlement()
        print(data.get("message") or "Manual settlement triggered.")


def _add_list_filters(parser: argparse.ArgumentParser):
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--status", type=str, default=None)
    parser.add_argument("--start-date", type=str, default=None, help="YYYY-MM-DD")
    parser.add_argument("--end-date", type=str, default=None, help="YYYY-MM-DD")
    parser.add_argument("--search", type=str, default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paydesk",
        description="Merchant and superadmin console for the payment gateway",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  paydesk login --email merchant@example.com
  paydesk balance
  paydesk payout-fee 750
  paydesk payout-request --amount 2500 --mode upi --upi-id shop@okaxis
  paydesk invoice TXN_123 --output invoice.pdf
  paydesk admin payouts --status requested
        """,
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory for session, logs and exports (default: {settings.data_dir})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in and store the session")
    p.add_argument("--email", type=str, default=None)
    p.add_argument("--password", type=str, default=None)
    p.set_defaults(handler=cmd_login)

    p = sub.add_parser("logout", help="Forget the stored session")
    p.set_defaults(handler=cmd_logout)

    p = sub.add_parser("whoami", help="Show the logged-in user")
    p.add_argument("--profile", action="store_true", help="Also fetch the profile")
    p.set_defaults(handler=cmd_whoami)

    p = sub.add_parser("balance", help="Show balance and payout eligibility")
    p.set_defaults(handler=cmd_balance)

    p = sub.add_parser("transactions", help="List transactions")
    _add_list_filters(p)
    p.add_argument("--gateway", type=str, default=None)
    p.add_argument("--sort-by", type=str, default=None)
    p.add_argument("--sort-order", choices=["asc", "desc"], default=None)
    p.add_argument("--api-key", action="store_true", help="Use the API-key transactions endpoint")
    p.set_defaults(handler=cmd_transactions)

    p = sub.add_parser("transaction", help="Show one transaction")
    p.add_argument("transaction_id")
    p.set_defaults(handler=cmd_transaction)

    p = sub.add_parser("payouts", help="List payouts")
    _add_list_filters(p)
    p.set_defaults(handler=cmd_payouts)

    p = sub.add_parser("payout-fee", help="Preview the fee for a payout amount")
    p.add_argument("amount", type=str)
    p.add_argument("--free", type=int, default=None, help="Free payouts remaining")
    p.set_defaults(handler=cmd_payout_fee)

    p = sub.add_parser("payout-request", help="Request a payout")
    p.add_argument("--amount", type=str, required=True)
    p.add_argument("--mode", choices=["upi", "bank", "crypto"], default="bank")
    p.add_argument("--upi-id", type=str, default=None)
    p.add_argument("--account-number", type=str, default=None)
    p.add_argument("--ifsc", type=str, default=None)
    p.add_argument("--holder", type=str, default=None, help="Account holder name")
    p.add_argument("--bank-name", type=str, default=None)
    p.add_argument("--branch-name", type=str, default=None)
    p.add_argument("--wallet", type=str, default=None, help="Crypto wallet address")
    p.add_argument("--network", type=str, default=None, help="Crypto network name")
    p.add_argument("--currency", type=str, default=None, help="Crypto currency name")
    p.add_argument("--notes", type=str, default=None)
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(handler=cmd_payout_request)

    p = sub.add_parser("payout-cancel", help="Cancel a pending payout")
    p.add_argument("payout_id")
    p.set_defaults(handler=cmd_payout_cancel)

    p = sub.add_parser("api-key", help="Show or create the merchant API key")
    p.add_argument("--create", action="store_true")
    p.set_defaults(handler=cmd_api_key)

    p = sub.add_parser("payment-link", help="Create a payment link")
    p.add_argument("--amount", type=str, required=True)
    p.add_argument("--name", type=str, required=True, help="Customer name")
    p.add_argument("--email", type=str, required=True, help="Customer email")
    p.add_argument("--phone", type=str, required=True, help="Customer phone")
    p.add_argument("--description", type=str, default=None)
    p.set_defaults(handler=cmd_payment_link)

    p = sub.add_parser("webhooks", help="Manage payment and payout webhooks")
    p.add_argument("action", choices=["show", "events", "configure", "test", "delete"])
    p.add_argument("--payout", action="store_true", help="Act on the payout webhook")
    p.add_argument("--url", type=str, default=None)
    p.add_argument("--events", nargs="*", default=None)
    p.set_defaults(handler=cmd_webhooks)

    p = sub.add_parser("invoice", help="Generate a PDF invoice for a transaction")
    p.add_argument("transaction_id")
    p.add_argument("--output", type=Path, default=None)
    p.set_defaults(handler=cmd_invoice)

    p = sub.add_parser("export", help="Export transactions or payouts to CSV")
    p.add_argument("kind", choices=["transactions", "payouts"])
    p.add_argument("--output", type=Path, default=None)
    _add_list_filters(p)
    p.set_defaults(handler=cmd_export)

    p = sub.add_parser("admin", help="Superadmin operations")
    p.add_argument(
        "action",
        choices=["stats", "merchants", "payouts", "approve", "reject", "process", "settle", "settle-all"],
    )
    p.add_argument("target", nargs="?", default=None, help="Payout or transaction id")
    p.add_argument("--merchant-id", type=str, default=None)
    p.add_argument("--status", type=str, default=None)
    p.add_argument("--include-inactive", action="store_true")
    p.add_argument("--search", type=str, default=None, help="Filter merchants by name or email")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=20)
    p.add_argument("--notes", type=str, default=None)
    p.add_argument("--reason", type=str, default=None)
    p.add_argument("--utr", type=str, default=None)
    p.add_argument("--hash", type=str, default=None, help="Crypto transaction hash")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(handler=cmd_admin)

    return parser


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.data_dir:
        settings.data_dir = args.data_dir

    if args.command == "admin" and args.action in ("approve", "reject", "process", "settle") and not args.target:
        parser.error(f"admin {args.action} needs a payout or transaction id")

    console = Console()
    console.auth.restore()

    try:
        args.handler(console, args)
    except (PaydeskError, CircuitBreakerOpen, ValueError) as e:
        print(f"Error: {getattr(e, 'message', None) or e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(130)


if __name__ == "__main__":
    main()
