"""Dedup key derivation for scraped travel records.

Two records describe the same underlying fact exactly when they produce the
same key. Records arrive as JSON-shaped dicts from search and scrape APIs, so
field names follow the wire format (``departureDate``, ``cabinClass``).

Field values are hashed verbatim. ``"sfo"`` and ``"SFO"`` produce different
flight keys, as do ``"2026-03-10"`` and ``"2026-3-10"``.
"""

import hashlib
import json

from src.models.enums import SourceType


def compute_semantic_hash(fields: list[str] | None = None) -> str:
    """SHA-256 hex digest of the fields joined with ``|``."""
    text = "|".join(str(f) for f in (fields or []))
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_flight_query_key(flight: dict) -> str:
    """Hash the structured search query a flight offer answers.

    Price, duration and stops are deliberately excluded: they are the mutable
    part of the offer that change detection compares.
    """
    key_obj = {
        "origin": flight.get("origin"),
        "destination": flight.get("destination"),
        "departureDate": flight.get("departureDate"),
        "returnDate": flight.get("returnDate"),
        "passengers": flight.get("passengers") or 1,
        "cabinClass": flight.get("cabinClass") or "Economy",
    }
    canonical = json.dumps(key_obj, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def join_amenities(amenities) -> str:
    if not amenities:
        return ""
    if isinstance(amenities, str):
        return amenities
    return ", ".join(str(a) for a in amenities)


def compute_content_hash(record: dict, source_type: SourceType) -> str:
    """Hash of a record's content fields."""
    source_type = SourceType(source_type)
    if source_type is SourceType.FLIGHT:
        return compute_flight_query_key(record)
    if source_type is SourceType.LODGING:
        return compute_semantic_hash([
            record.get("title") or "",
            record.get("description") or "",
            join_amenities(record.get("amenities")),
        ])
    return compute_semantic_hash([record.get("text") or record.get("title") or ""])


def compute_dedup_key(record: dict, source_type: SourceType) -> str:
    """Derive the identity key used to match a record against stored chunks.

    - flight: structured query key (trip-agnostic)
    - lodging: listing identity (title + url, plus ``sourceId`` when
      present), so a changed description is detected as a change to the
      same listing. A listing with neither url nor sourceId has no stable
      identity and falls back to its content hash.
    - web: content hash of the snippet text
    """
    source_type = SourceType(source_type)
    if source_type is SourceType.LODGING:
        url = record.get("url") or ""
        source_id = record.get("sourceId") or ""
        if not url and not source_id:
            return compute_content_hash(record, source_type)
        fields = [record.get("title") or "", url]
        if source_id:
            fields.append(source_id)
        return compute_semantic_hash(fields)
    return compute_content_hash(record, source_type)
