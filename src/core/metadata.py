"""Pack JSON fields into Stripe session metadata and back.

Stripe caps metadata at 50 keys with values of at most 500 characters, so
each JSON field is split into ``<name>``, ``<name>__1``, ``<name>__2`` ...
chunks and reassembled in order on the webhook side.
"""

import json
from typing import Any

MAX_KEYS = 50
MAX_VALUE_LENGTH = 500
_CHUNK_SEPARATOR = "__"


def pack_metadata(plain: dict[str, str], json_fields: dict[str, Any]) -> dict[str, str]:
    metadata = dict(plain)
    for name, value in json_fields.items():
        encoded = json.dumps(value, separators=(",", ":"))
        chunks = [encoded[i : i + MAX_VALUE_LENGTH] for i in range(0, len(encoded), MAX_VALUE_LENGTH)] or [""]
        metadata[name] = chunks[0]
        for index, chunk in enumerate(chunks[1:], start=1):
            metadata[f"{name}{_CHUNK_SEPARATOR}{index}"] = chunk

    if len(metadata) > MAX_KEYS:
        raise ValueError(f"checkout metadata needs {len(metadata)} keys, Stripe allows {MAX_KEYS}")
    return metadata


def read_json_field(metadata: dict[str, str], name: str) -> Any:
    """Reassemble a packed field; returns None when the field is absent."""
    if name not in metadata:
        return None
    parts = [metadata[name]]
    index = 1
    while f"{name}{_CHUNK_SEPARATOR}{index}" in metadata:
        parts.append(metadata[f"{name}{_CHUNK_SEPARATOR}{index}"])
        index += 1
    return json.loads("".join(parts))


def summarise_offer(offer: dict[str, Any] | None) -> dict[str, Any]:
    """Keep only the offer fields the confirmation relies on."""
    if not offer:
        return {}
    slices = []
    for s in offer.get("slices") or []:
        segments = s.get("segments") or []
        slices.append(
            {
                "origin": (s.get("origin") or {}).get("iata_code"),
                "destination": (s.get("destination") or {}).get("iata_code"),
                "departing_at": segments[0].get("departing_at") if segments else None,
                "arriving_at": segments[-1].get("arriving_at") if segments else None,
                "segment_ids": [seg.get("id") for seg in segments if seg.get("id")],
            }
        )
    return {
        "id": offer.get("id"),
        "total_amount": offer.get("total_amount"),
        "total_currency": offer.get("total_currency"),
        "expires_at": offer.get("expires_at"),
        "owner": (offer.get("owner") or {}).get("name"),
        "slices": slices,
    }
