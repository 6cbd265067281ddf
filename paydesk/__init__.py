"""paydesk - merchant and superadmin console for the payment gateway API."""

__version__ = "0.1.0"
