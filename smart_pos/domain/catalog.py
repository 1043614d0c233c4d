from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Iterator, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from smart_pos.errors import CatalogError


@dataclass(frozen=True)
class Product:
    sku: str
    name: str
    unit_price: Decimal


class ProductRecord(BaseModel):
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    unit_price: Decimal = Field(ge=0)

    @field_validator("sku", "name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


DEFAULT_PRODUCTS: list[dict] = [
    {"sku": "RICE001", "name": "Basmati Rice 1kg", "unit_price": "80.00"},
    {"sku": "OIL001", "name": "Sunflower Oil 1L", "unit_price": "180.00"},
    {"sku": "TEA001", "name": "Tea Powder 500g", "unit_price": "200.00"},
    {"sku": "SHIRT001", "name": "Formal Shirt (M)", "unit_price": "899.00"},
    {"sku": "JEAN001", "name": "Denim Jeans (32)", "unit_price": "1299.00"},
    {"sku": "BIR001", "name": "Chicken Biryani", "unit_price": "220.00"},
    {"sku": "PIZ001", "name": "Margherita Pizza", "unit_price": "299.00"},
]


class Catalog:
    """Immutable, ordered product list loaded once before the till opens."""

    def __init__(self, products: Iterable[Product]):
        self._products: dict[str, Product] = {}
        for product in products:
            if product.sku in self._products:
                raise CatalogError(f"duplicate sku in catalog: {product.sku}")
            self._products[product.sku] = product

    @classmethod
    def from_records(cls, records: Iterable[Mapping]) -> "Catalog":
        products: list[Product] = []
        for index, record in enumerate(records):
            try:
                parsed = ProductRecord.model_validate(record)
            except ValidationError as exc:
                raise CatalogError(f"invalid catalog record at index {index}: {exc}") from exc
            products.append(Product(sku=parsed.sku, name=parsed.name, unit_price=parsed.unit_price))
        return cls(products)

    def get(self, sku: str) -> Product:
        try:
            return self._products[sku]
        except KeyError:
            raise CatalogError(f"unknown sku: {sku}") from None

    def __contains__(self, sku: object) -> bool:
        return sku in self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def __len__(self) -> int:
        return len(self._products)


def default_catalog() -> Catalog:
    return Catalog.from_records(DEFAULT_PRODUCTS)
