"""Invoice models."""

from decimal import Decimal

from pydantic import BaseModel, Field


class Product(BaseModel):
    """A catalog product that can appear on an invoice."""

    name: str
    category: str = "Uncategorized"
    price: Decimal


class InvoiceLine(BaseModel):
    """A product line on a synthesized invoice."""

    name: str = Field(description="Product name")
    category: str = Field(default="Uncategorized")
    price: Decimal = Field(description="Unit price")
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class InvoiceData(BaseModel):
    """Line items plus the discount that brings them to the paid amount."""

    products: list[InvoiceLine] = Field(default_factory=list)
    subtotal: Decimal = Field(description="Sum of price x quantity over all lines")
    discount: Decimal = Field(default=Decimal("0"), description="Subtotal minus amount paid")
    discount_percentage: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(description="Amount paid; subtotal minus discount")

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.products)

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display."""
        return {
            "lines": len(self.products),
            "items": self.item_count,
            "subtotal": f"{self.subtotal:.2f}",
            "discount": f"{self.discount:.2f} ({self.discount_percentage}%)",
            "total": f"{self.total:.2f}",
        }
