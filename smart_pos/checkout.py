from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from smart_pos.core.config import Settings, get_settings
from smart_pos.domain.cart.ledger import CartLedger
from smart_pos.domain.sales.finalizer import SaleFinalizer, SoldItemsSnapshot
from smart_pos.errors import SinkError
from smart_pos.invoice.builder import BusinessInfo, InvoiceDocumentBuilder, InvoiceLayout, suggested_filename
from smart_pos.invoice.sinks import DeliveryReceipt, DocumentSink, build_document_sink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletedSale:
    snapshot: SoldItemsSnapshot
    document: bytes
    filename: str


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    receipt: DeliveryReceipt | None = None
    reason: str | None = None
    retryable: bool = False


class Checkout:
    """Finalize -> render -> deliver. The sale is committed once finalize returns."""

    def __init__(
        self,
        ledger: CartLedger,
        finalizer: SaleFinalizer,
        builder: InvoiceDocumentBuilder,
        sink: DocumentSink,
        business_info: BusinessInfo,
    ):
        self.ledger = ledger
        self.finalizer = finalizer
        self.builder = builder
        self.sink = sink
        self.business_info = business_info

    @classmethod
    def from_settings(cls, ledger: CartLedger | None = None, settings: Settings | None = None) -> "Checkout":
        settings = settings or get_settings()
        return cls(
            ledger=ledger or CartLedger(tax_rate=settings.tax_rate),
            finalizer=SaleFinalizer(),
            builder=InvoiceDocumentBuilder(InvoiceLayout.from_settings(settings)),
            sink=build_document_sink(settings),
            business_info=BusinessInfo.from_settings(settings),
        )

    def complete_sale(self) -> CompletedSale:
        snapshot = self.finalizer.finalize(self.ledger)
        document = self.builder.render(
            snapshot,
            snapshot.tax_rate,
            self.business_info,
            snapshot.finalized_at,
        )
        return CompletedSale(snapshot=snapshot, document=document, filename=suggested_filename(snapshot))

    def share(self, completed: CompletedSale) -> DeliveryResult:
        try:
            receipt = self.sink.deliver(completed.document, completed.filename)
        except SinkError as exc:
            logger.warning(
                "invoice delivery failed: invoice_id=%s backend=%s retryable=%s: %s",
                completed.snapshot.invoice_id,
                self.sink.backend,
                exc.retryable,
                exc,
            )
            return DeliveryResult(delivered=False, reason=str(exc), retryable=exc.retryable)
        logger.info(
            "invoice delivered: invoice_id=%s backend=%s location=%s",
            completed.snapshot.invoice_id,
            receipt.backend,
            receipt.location,
        )
        return DeliveryResult(delivered=True, receipt=receipt)

    async def share_async(self, completed: CompletedSale) -> DeliveryResult:
        # the ledger was drained in complete_sale; cancelling here only abandons the delivery
        return await asyncio.to_thread(self.share, completed)
