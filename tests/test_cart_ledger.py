from __future__ import annotations

import random
import threading
from collections import Counter
from decimal import Decimal

import pytest

from smart_pos.domain.cart.ledger import CartLedger
from smart_pos.errors import CartError


def test_rice_and_tea_scenario(ledger, catalog):
    ledger.add_item(catalog.get("RICE001"))
    ledger.add_item(catalog.get("RICE001"))
    ledger.add_item(catalog.get("TEA001"))

    lines = ledger.line_items()
    assert [(line.sku, line.quantity, line.line_total) for line in lines] == [
        ("RICE001", 2, Decimal("160.00")),
        ("TEA001", 1, Decimal("200.00")),
    ]
    assert ledger.subtotal() == Decimal("360.00")
    assert ledger.tax() == Decimal("18.00")
    assert ledger.total() == Decimal("378.00")

    summary = ledger.summary()
    assert (summary.item_count, summary.subtotal, summary.tax, summary.total) == (2, "360.00", "18.00", "378.00")


def test_random_add_and_clear_sequences_keep_invariants(catalog):
    rng = random.Random(20260314)
    products = list(catalog)
    for _ in range(50):
        ledger = CartLedger(tax_rate=Decimal("0.05"))
        adds: Counter[str] = Counter()
        for _ in range(rng.randint(0, 40)):
            if rng.random() < 0.05:
                ledger.clear()
                adds.clear()
                continue
            product = rng.choice(products)
            ledger.add_item(product)
            adds[product.sku] += 1

            lines = ledger.line_items()
            assert len(lines) == len(adds)
            assert {line.sku: line.quantity for line in lines} == dict(adds)
            assert ledger.subtotal() == sum((line.line_total for line in lines), Decimal("0"))
            assert ledger.tax() == ledger.subtotal() * Decimal("0.05")
            assert ledger.total() == ledger.subtotal() + ledger.tax()


def test_insertion_order_is_display_order(ledger, catalog):
    for sku in ["PIZ001", "RICE001", "PIZ001", "OIL001", "RICE001"]:
        ledger.add_item(catalog.get(sku))
    assert [line.sku for line in ledger.line_items()] == ["PIZ001", "RICE001", "OIL001"]


def test_returned_line_items_are_detached(ledger, catalog):
    ledger.add_item(catalog.get("TEA001"))
    lines = ledger.line_items()
    lines[0].quantity = 99

    assert ledger.quantity_of("TEA001") == 1
    assert ledger.total() == Decimal("210.00")
    with pytest.raises(TypeError):
        lines[0] = None  # type: ignore[index]


def test_clear_is_idempotent_and_notifies(ledger, catalog):
    events = []
    ledger.subscribe(events.append)

    ledger.clear()
    ledger.add_item(catalog.get("OIL001"))
    ledger.clear()
    ledger.clear()

    assert ledger.is_empty()
    assert ledger.total() == Decimal("0")
    assert [e.kind for e in events] == ["cleared", "added", "cleared", "cleared"]


def test_observers_get_change_events_and_can_unsubscribe(ledger, catalog):
    events = []
    unsubscribe = ledger.subscribe(events.append)

    ledger.add_item(catalog.get("RICE001"))
    ledger.add_item(catalog.get("RICE001"))
    unsubscribe()
    ledger.add_item(catalog.get("TEA001"))

    assert [(e.kind, e.sku, e.item_count) for e in events] == [("added", "RICE001", 1), ("added", "RICE001", 1)]


def test_failing_observer_does_not_break_mutation(ledger, catalog, caplog):
    seen = []

    def broken(_event):
        raise RuntimeError("render failed")

    ledger.subscribe(broken)
    ledger.subscribe(seen.append)

    ledger.add_item(catalog.get("BIR001"))

    assert ledger.quantity_of("BIR001") == 1
    assert len(seen) == 1
    assert "cart observer failed" in caplog.text


def test_set_quantity_and_remove(ledger, catalog):
    ledger.add_item(catalog.get("RICE001"))
    ledger.add_item(catalog.get("TEA001"))

    ledger.set_quantity("RICE001", 5)
    assert ledger.quantity_of("RICE001") == 5
    assert ledger.subtotal() == Decimal("600.00")

    ledger.set_quantity("RICE001", 0)
    assert [line.sku for line in ledger.line_items()] == ["TEA001"]

    ledger.remove_item("TEA001")
    assert ledger.is_empty()


def test_set_quantity_and_remove_unknown_sku(ledger):
    with pytest.raises(CartError):
        ledger.set_quantity("NOPE", 2)
    with pytest.raises(CartError):
        ledger.remove_item("NOPE")


def test_re_adding_after_removal_starts_new_line(ledger, catalog):
    ledger.add_item(catalog.get("RICE001"))
    ledger.add_item(catalog.get("TEA001"))
    ledger.remove_item("RICE001")
    ledger.add_item(catalog.get("RICE001"))

    assert [(line.sku, line.quantity) for line in ledger.line_items()] == [("TEA001", 1), ("RICE001", 1)]


def test_concurrent_adds_keep_one_line_per_sku(ledger, catalog):
    products = [catalog.get("RICE001"), catalog.get("TEA001")]

    def worker():
        for _ in range(500):
            for product in products:
                ledger.add_item(product)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert [(line.sku, line.quantity) for line in ledger.line_items()] == [("RICE001", 2000), ("TEA001", 2000)]


def test_negative_tax_rate_rejected():
    with pytest.raises(ValueError):
        CartLedger(tax_rate=Decimal("-0.01"))
