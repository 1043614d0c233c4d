from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable

from smart_pos.domain.catalog import Product
from smart_pos.domain.money import Totals, compute_totals, format_money
from smart_pos.errors import CartError

logger = logging.getLogger(__name__)


@dataclass
class LineItem:
    product: Product
    quantity: int = 1

    @property
    def sku(self) -> str:
        return self.product.sku

    @property
    def line_total(self) -> Decimal:
        return self.product.unit_price * self.quantity


@dataclass(frozen=True)
class CartChanged:
    kind: str  # added | quantity_set | removed | cleared | drained
    sku: str | None
    item_count: int


@dataclass(frozen=True)
class CartSummary:
    item_count: int
    subtotal: str
    tax: str
    total: str


CartObserver = Callable[[CartChanged], None]


class CartLedger:
    def __init__(self, tax_rate: Decimal):
        if tax_rate < 0:
            raise ValueError("tax_rate must not be negative")
        self.tax_rate = tax_rate
        self._lines: dict[str, LineItem] = {}
        self._observers: list[CartObserver] = []
        self._lock = threading.RLock()

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def subscribe(self, observer: CartObserver) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _notify(self, kind: str, sku: str | None) -> None:
        event = CartChanged(kind=kind, sku=sku, item_count=len(self._lines))
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("cart observer failed on %s event", kind)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product: Product) -> None:
        """Add one unit of ``product``, merging into its existing line if any."""
        with self._lock:
            line = self._lines.get(product.sku)
            if line is None:
                self._lines[product.sku] = LineItem(product=product, quantity=1)
            else:
                line.quantity += 1
            self._notify("added", product.sku)

    def set_quantity(self, sku: str, quantity: int) -> None:
        with self._lock:
            if sku not in self._lines:
                raise CartError(f"sku not in cart: {sku}")
            if quantity <= 0:
                del self._lines[sku]
                self._notify("removed", sku)
                return
            self._lines[sku].quantity = quantity
            self._notify("quantity_set", sku)

    def remove_item(self, sku: str) -> None:
        with self._lock:
            if self._lines.pop(sku, None) is None:
                raise CartError(f"sku not in cart: {sku}")
            self._notify("removed", sku)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
            self._notify("cleared", None)

    def drain(self) -> tuple[LineItem, ...]:
        """Detach every line and empty the cart in one step."""
        with self._lock:
            drained = tuple(replace(line) for line in self._lines.values())
            self._lines.clear()
            self._notify("drained", None)
        return drained

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def line_items(self) -> tuple[LineItem, ...]:
        with self._lock:
            return tuple(replace(line) for line in self._lines.values())

    def quantity_of(self, sku: str) -> int:
        with self._lock:
            line = self._lines.get(sku)
            return line.quantity if line else 0

    def item_count(self) -> int:
        with self._lock:
            return len(self._lines)

    def is_empty(self) -> bool:
        return self.item_count() == 0

    def totals(self) -> Totals:
        with self._lock:
            return compute_totals((line.line_total for line in self._lines.values()), self.tax_rate)

    def subtotal(self) -> Decimal:
        return self.totals().subtotal

    def tax(self) -> Decimal:
        return self.totals().tax

    def total(self) -> Decimal:
        return self.totals().total

    def summary(self) -> CartSummary:
        with self._lock:
            totals = self.totals()
            return CartSummary(
                item_count=len(self._lines),
                subtotal=format_money(totals.subtotal),
                tax=format_money(totals.tax),
                total=format_money(totals.total),
            )
