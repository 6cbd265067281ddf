"""Products used to itemize invoices."""

from decimal import Decimal

from paydesk.models.invoice import Product


def _product(name: str, category: str, price: str) -> Product:
    return Product(name=name, category=category, price=Decimal(price))


PRODUCTS: list[Product] = [
    _product("MC13 HYBRID PADDY", "Uncategorized", "1250.00"),
    _product("PAC 501 JOWAR", "Plant accessories", "1008.90"),
    _product("PAC837 HYBRID PADDY (RICE)", "Plant accessories", "8500.90"),
    _product("SMART SILAGE INOCULANT", "Plant accessories", "2000.90"),
    _product("Iris Hybrid Coriander Seeds", "Uncategorized", "120.00"),
    _product("Iris Hybrid Okra Seeds", "Uncategorized", "110.00"),
    _product("Katyayani Active Humic Acid, Fulvic Acid Fertilizer", "Uncategorized", "360.00"),
    _product("Yellow Marigold Flower Seeds", "Plant accessories", "100.00"),
    _product("Fat Boy (Multi-Cut Forage Sorghum)", "Uncategorized", "501.00"),
    _product("Multistar RZ F1 Cucumber", "Plant accessories", "11001.90"),
    _product("Surabhi Black Mustard Seeds", "Uncategorized", "749.00"),
    _product("Surabhi Coriander Seeds", "Uncategorized", "100.00"),
]
