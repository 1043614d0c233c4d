from smart_pos.invoice.builder import (
    BusinessInfo,
    InvoiceDocumentBuilder,
    InvoiceLayout,
    paginate,
    render,
    suggested_filename,
    validate_snapshot,
)
from smart_pos.invoice.sinks import (
    DeliveryReceipt,
    DocumentSink,
    LocalDocumentSink,
    MinioDocumentSink,
    PreviewDocumentSink,
    build_document_sink,
)

__all__ = [
    "BusinessInfo",
    "DeliveryReceipt",
    "DocumentSink",
    "InvoiceDocumentBuilder",
    "InvoiceLayout",
    "LocalDocumentSink",
    "MinioDocumentSink",
    "PreviewDocumentSink",
    "build_document_sink",
    "paginate",
    "render",
    "suggested_filename",
    "validate_snapshot",
]
