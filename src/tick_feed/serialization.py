from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from tick_feed.contracts import TickRecord

_DOCUMENT_KEYS = {
    "symbol": "symbol",
    "side": "buysellindicator",
    "quantity": "quantity",
    "price": "price",
    "sequence": "packetSequence",
}


def record_to_document(record: TickRecord) -> dict[str, Any]:
    return {
        _DOCUMENT_KEYS["symbol"]: record.symbol,
        _DOCUMENT_KEYS["side"]: record.side,
        _DOCUMENT_KEYS["quantity"]: record.quantity,
        _DOCUMENT_KEYS["price"]: record.price,
        _DOCUMENT_KEYS["sequence"]: record.sequence,
    }


def serialize_document(records: Iterable[TickRecord]) -> str:
    return json.dumps([record_to_document(record) for record in records], indent="\t")


def write_document(path: str | Path, records: Iterable[TickRecord]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    # written to a sibling first so a failed write never leaves a partial document
    staging = target.with_name(target.name + ".partial")
    staging.write_text(serialize_document(records), encoding="utf-8")
    staging.replace(target)
    return target
