from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

from smart_pos.core.canonical import sha256_hex
from smart_pos.domain.cart.ledger import CartLedger
from smart_pos.domain.money import Totals, compute_totals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SoldItem:
    sku: str
    product_name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


@dataclass(frozen=True)
class SoldItemsSnapshot:
    items: tuple[SoldItem, ...]
    tax_rate: Decimal
    finalized_at: datetime
    invoice_id: str

    @property
    def is_empty(self) -> bool:
        return not self.items

    def totals(self) -> Totals:
        return compute_totals((item.line_total for item in self.items), self.tax_rate)

    def digest(self) -> str:
        return sha256_hex(self)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def epoch_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def invoice_id_for(timestamp: datetime) -> str:
    return f"INV-{epoch_millis(timestamp)}"


class SaleFinalizer:
    """Turns the live cart into an immutable record of what was sold."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock
        self._last_millis = 0
        self._lock = threading.Lock()

    def _next_invoice_id(self, finalized_at: datetime) -> str:
        with self._lock:
            millis = max(epoch_millis(finalized_at), self._last_millis + 1)
            self._last_millis = millis
        return f"INV-{millis}"

    def finalize(self, ledger: CartLedger) -> SoldItemsSnapshot:
        lines = ledger.drain()
        finalized_at = self.clock()
        snapshot = SoldItemsSnapshot(
            items=tuple(
                SoldItem(
                    sku=line.sku,
                    product_name=line.product.name,
                    unit_price=line.product.unit_price,
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in lines
            ),
            tax_rate=ledger.tax_rate,
            finalized_at=finalized_at,
            invoice_id=self._next_invoice_id(finalized_at),
        )
        logger.info(
            "sale finalized: invoice_id=%s lines=%d total=%s",
            snapshot.invoice_id,
            len(snapshot.items),
            snapshot.totals().total,
        )
        return snapshot
