from __future__ import annotations

from decimal import Decimal

import pytest

from smart_pos.core.config import Settings, get_settings
from smart_pos.invoice.builder import BusinessInfo, InvoiceLayout


def test_defaults_match_the_till():
    settings = get_settings()
    assert settings.tax_rate == Decimal("0.05")
    assert settings.tax_label == "GST"
    assert settings.invoice_rows_per_page == 20


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("POS_TAX_RATE", "0.18")
    monkeypatch.setenv("POS_BUSINESS_NAME", "Corner Store")
    monkeypatch.setenv("POS_BUSINESS_ADDRESS_LINES", '["1 Main Rd", "Pune"]')
    get_settings.cache_clear()

    settings = get_settings()
    assert settings.tax_rate == Decimal("0.18")
    assert BusinessInfo.from_settings(settings) == BusinessInfo(
        name="Corner Store",
        address_lines=("1 Main Rd", "Pune"),
        tax_id=settings.business_tax_id,
    )
    assert InvoiceLayout.from_settings(settings).rows_per_page == 20


@pytest.mark.parametrize("kwargs", [{"tax_rate": Decimal("-0.01")}, {"tax_rate": Decimal("1")}, {"invoice_rows_per_page": 0}])
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)


def test_default_minio_credentials_refused_outside_dev():
    with pytest.raises(ValueError, match="POS_MINIO_ACCESS_KEY"):
        Settings(env="prod", sink_backend="minio")

    Settings(env="prod", sink_backend="local")


def test_configure_logging_sets_package_level():
    import logging

    from smart_pos.core.logging import configure_logging

    configure_logging("debug")
    assert logging.getLogger("smart_pos").level == logging.DEBUG
    configure_logging("WARNING")
    assert logging.getLogger("smart_pos").level == logging.WARNING
    logging.getLogger("smart_pos").setLevel(logging.NOTSET)
