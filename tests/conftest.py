from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from smart_pos.core.config import get_settings
from smart_pos.domain.cart.ledger import CartLedger
from smart_pos.domain.catalog import Catalog, default_catalog
from smart_pos.domain.sales.finalizer import SaleFinalizer
from smart_pos.invoice.builder import BusinessInfo, InvoiceDocumentBuilder, InvoiceLayout

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)


class StepClock:
    def __init__(self, start: datetime = FIXED_NOW, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture(autouse=True)
def configure_test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("POS_DOCUMENTS_DIR", str(tmp_path / "invoices"))
    monkeypatch.setenv("POS_SINK_BACKEND", "local")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture()
def catalog() -> Catalog:
    return default_catalog()


@pytest.fixture()
def ledger() -> CartLedger:
    return CartLedger(tax_rate=Decimal("0.05"))


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def finalizer(clock: StepClock) -> SaleFinalizer:
    return SaleFinalizer(clock=clock)


@pytest.fixture()
def business() -> BusinessInfo:
    return BusinessInfo(
        name="Corner Store",
        address_lines=("123 Business St, City",),
        tax_id="GSTIN: 29ABCDE1234F1Z5",
    )


@pytest.fixture()
def plain_builder() -> InvoiceDocumentBuilder:
    """Uncompressed content streams so tests can look for drawn text."""
    return InvoiceDocumentBuilder(InvoiceLayout(page_compression=False))
