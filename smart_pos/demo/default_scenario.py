from __future__ import annotations

from smart_pos.checkout import Checkout
from smart_pos.core.config import get_settings
from smart_pos.domain.cart.ledger import CartLedger
from smart_pos.domain.catalog import default_catalog
from smart_pos.domain.money import format_money
from smart_pos.domain.sales.finalizer import SaleFinalizer
from smart_pos.invoice.builder import BusinessInfo, InvoiceDocumentBuilder, InvoiceLayout
from smart_pos.invoice.sinks import DocumentSink, build_document_sink

SCENARIO_ID = "counter_sale_rice_tea_v1"
SCENARIO_SKUS = ["RICE001", "RICE001", "TEA001"]


def run_default_scenario(sink: DocumentSink | None = None, finalizer: SaleFinalizer | None = None) -> dict:
    settings = get_settings()
    catalog = default_catalog()
    ledger = CartLedger(tax_rate=settings.tax_rate)
    checkout = Checkout(
        ledger=ledger,
        finalizer=finalizer or SaleFinalizer(),
        builder=InvoiceDocumentBuilder(InvoiceLayout.from_settings(settings)),
        sink=sink or build_document_sink(settings),
        business_info=BusinessInfo.from_settings(settings),
    )

    for sku in SCENARIO_SKUS:
        ledger.add_item(catalog.get(sku))
    cart_summary = ledger.summary()

    completed = checkout.complete_sale()
    delivery = checkout.share(completed)
    totals = completed.snapshot.totals()

    return {
        "scenario_id": SCENARIO_ID,
        "invoice_id": completed.snapshot.invoice_id,
        "line_items": [
            {
                "sku": item.sku,
                "name": item.product_name,
                "quantity": item.quantity,
                "line_total": format_money(item.line_total),
            }
            for item in completed.snapshot.items
        ],
        "cart_summary": {
            "subtotal": cart_summary.subtotal,
            "tax": cart_summary.tax,
            "total": cart_summary.total,
        },
        "invoice_totals": {
            "subtotal": format_money(totals.subtotal),
            "tax": format_money(totals.tax),
            "total": format_money(totals.total),
        },
        "cart_empty_after_sale": ledger.is_empty(),
        "document_bytes": len(completed.document),
        "filename": completed.filename,
        "delivered": delivery.delivered,
        "location": delivery.receipt.location if delivery.receipt else None,
        "failure_reason": delivery.reason,
    }
