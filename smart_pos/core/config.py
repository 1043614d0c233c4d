from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MINIO_ACCESS_KEY = "minioadmin"
DEFAULT_MINIO_SECRET_KEY = "minioadmin"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="POS_", extra="ignore")

    app_name: str = "Smart POS"
    env: str = "dev"
    log_level: str = "INFO"

    tax_rate: Decimal = Field(default=Decimal("0.05"), description="Fraction of subtotal, e.g. 0.05 for 5%")
    tax_label: str = "GST"

    business_name: str = "Your Business Name"
    business_address_lines: list[str] = Field(default_factory=lambda: ["123 Business St, City"])
    business_tax_id: str = "GSTIN: XXXXXXXXXXX"

    invoice_title: str = "TAX INVOICE"
    closing_message: str = "Thank you for your business!"
    invoice_rows_per_page: int = 20
    invoice_page_compression: bool = True

    # Document sink backend: local | minio | preview
    sink_backend: str = "local"
    documents_dir: Path = Path("/tmp/smart-pos/invoices")
    minio_endpoint: str = "minio:9000"
    minio_access_key: str = DEFAULT_MINIO_ACCESS_KEY
    minio_secret_key: str = DEFAULT_MINIO_SECRET_KEY
    minio_bucket: str = "invoices"
    minio_secure: bool = False
    share_link_ttl_seconds: int = 3600

    def model_post_init(self, __context) -> None:
        if not (Decimal("0") <= self.tax_rate < Decimal("1")):
            raise ValueError(f"tax_rate must be in [0, 1), got {self.tax_rate}")
        if self.invoice_rows_per_page < 1:
            raise ValueError("invoice_rows_per_page must be at least 1")

        if self.env.lower() == "dev" or self.sink_backend != "minio":
            return

        insecure_items: list[str] = []
        if self.minio_access_key == DEFAULT_MINIO_ACCESS_KEY:
            insecure_items.append("POS_MINIO_ACCESS_KEY")
        if self.minio_secret_key == DEFAULT_MINIO_SECRET_KEY:
            insecure_items.append("POS_MINIO_SECRET_KEY")

        if insecure_items:
            raise ValueError(
                "insecure default credentials are not allowed outside dev mode; set env vars: "
                + ", ".join(sorted(insecure_items))
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
