from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timezone
from decimal import Decimal
from hashlib import sha256
from typing import Any


class CanonicalError(ValueError):
    pass


def iso_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_canonical_obj(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_canonical_obj(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_canonical_obj(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [to_canonical_obj(v) for v in value]
    if isinstance(value, datetime):
        return iso_utc(value)
    if isinstance(value, Decimal):
        # 80 and 80.00 are the same amount
        return format(value.normalize(), "f")
    if isinstance(value, float):
        raise CanonicalError("float values are not allowed in canonical JSON")
    if value is None or isinstance(value, (str, int, bool)):
        return value
    raise CanonicalError(f"unsupported canonical type: {type(value)!r}")


def canonical_json(value: Any) -> bytes:
    return json.dumps(
        to_canonical_obj(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    ).encode("utf-8")


def sha256_hex(value: Any) -> str:
    return sha256(canonical_json(value)).hexdigest()
