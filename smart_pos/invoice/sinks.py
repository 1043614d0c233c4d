from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from hashlib import sha256
from pathlib import Path

from minio import Minio
from minio.error import S3Error

from smart_pos.core.config import Settings, get_settings
from smart_pos.errors import SinkError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


@dataclass(frozen=True)
class DeliveryReceipt:
    filename: str
    location: str
    document_hash: str
    backend: str
    delivered_at: datetime


def _check_filename(filename: str) -> str:
    if not _SAFE_FILENAME.match(filename):
        raise SinkError(f"refusing unsafe document filename: {filename!r}", retryable=False)
    return filename


class DocumentSink:
    backend = "abstract"

    def deliver(self, document: bytes, filename: str) -> DeliveryReceipt:  # pragma: no cover - interface
        raise NotImplementedError


class LocalDocumentSink(DocumentSink):
    """Save-to-file delivery into a documents directory."""

    backend = "local"

    def __init__(self, root: Path):
        self.root = root

    def deliver(self, document: bytes, filename: str) -> DeliveryReceipt:
        path = self.root / _check_filename(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(document)
        except OSError as exc:
            raise SinkError(f"could not save {filename} to {self.root}: {exc}") from exc
        return DeliveryReceipt(
            filename=filename,
            location=str(path),
            document_hash=sha256(document).hexdigest(),
            backend=self.backend,
            delivered_at=datetime.now(timezone.utc),
        )


class PreviewDocumentSink(DocumentSink):
    """Hands the bytes to a print/preview surface instead of a named file.

    Only the most recent document is held; each delivery replaces the last.
    """

    backend = "preview"

    def __init__(self):
        self.filename: str | None = None
        self.document: bytes | None = None

    def deliver(self, document: bytes, filename: str) -> DeliveryReceipt:
        self.filename = _check_filename(filename)
        self.document = document
        return DeliveryReceipt(
            filename=filename,
            location=f"preview://{filename}",
            document_hash=sha256(document).hexdigest(),
            backend=self.backend,
            delivered_at=datetime.now(timezone.utc),
        )


class MinioDocumentSink(DocumentSink):
    """Uploads to an S3-compatible bucket and shares a time-limited download link."""

    backend = "minio"

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        link_ttl: timedelta = timedelta(hours=1),
        client: Minio | None = None,
    ):
        self.client = client or Minio(endpoint, access_key=access_key, secret_key=secret_key, secure=secure)
        self.bucket = bucket
        self.link_ttl = link_ttl
        self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        found = self.client.bucket_exists(self.bucket)
        if not found:
            self.client.make_bucket(self.bucket)

    def deliver(self, document: bytes, filename: str) -> DeliveryReceipt:
        object_name = _check_filename(filename)
        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=object_name,
                data=io.BytesIO(document),
                length=len(document),
                content_type=PDF_CONTENT_TYPE,
            )
            url = self.client.presigned_get_object(self.bucket, object_name, expires=self.link_ttl)
        except S3Error as exc:
            raise SinkError(f"object store rejected {filename}: {exc.code}") from exc
        except Exception as exc:
            raise SinkError(f"object store unreachable while sharing {filename}: {exc}") from exc
        return DeliveryReceipt(
            filename=filename,
            location=url,
            document_hash=sha256(document).hexdigest(),
            backend=self.backend,
            delivered_at=datetime.now(timezone.utc),
        )


def build_document_sink(settings: Settings | None = None) -> DocumentSink:
    settings = settings or get_settings()
    if settings.sink_backend == "preview":
        return PreviewDocumentSink()
    if settings.sink_backend == "minio":
        try:
            return MinioDocumentSink(
                endpoint=settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                bucket=settings.minio_bucket,
                secure=settings.minio_secure,
                link_ttl=timedelta(seconds=settings.share_link_ttl_seconds),
            )
        except S3Error as exc:
            logger.warning("minio bucket setup failed, saving invoices locally: %s", exc.code)
        except Exception as exc:
            logger.warning("minio unavailable, saving invoices locally: %s", exc)
    return LocalDocumentSink(settings.documents_dir)
