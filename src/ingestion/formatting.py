"""Text representations of raw records, as they are embedded and stored."""

import json

from src.ingestion.dedup import join_amenities
from src.models.enums import SourceType

# Fields compared against the active chunk's payload to detect a material change.
MUTABLE_FIELDS: dict[SourceType, tuple[str, ...]] = {
    SourceType.FLIGHT: ("price", "duration", "stops"),
    SourceType.LODGING: ("description", "amenities"),
    SourceType.WEB: ("text",),
}


def _value(record: dict, key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)


def format_flight(record: dict) -> str:
    return (
        f"{_value(record, 'airline')} {_value(record, 'price')} "
        f"{_value(record, 'duration')} {_value(record, 'stops')} stops"
    ).strip()


def format_lodging(record: dict) -> str:
    return (
        f"{_value(record, 'title')} {_value(record, 'description')} "
        f"{join_amenities(record.get('amenities'))}"
    ).strip()


def format_web(record: dict) -> str:
    return (record.get("text") or record.get("title") or "").strip()


def default_title(record: dict, source_type: SourceType) -> str:
    """Display title for records that carry none."""
    if record.get("title"):
        return str(record["title"])
    if SourceType(source_type) is SourceType.FLIGHT and record.get("origin") and record.get("destination"):
        return f"{record['origin']} to {record['destination']}"
    return "Source"


def build_record_text(record: dict, source_type: SourceType) -> str:
    """Build the category-specific text that gets embedded for a record."""
    source_type = SourceType(source_type)
    if source_type is SourceType.FLIGHT:
        return format_flight(record)
    if source_type is SourceType.LODGING:
        return format_lodging(record)
    return format_web(record)


def has_material_change(previous: dict, current: dict, source_type: SourceType) -> bool:
    """True when any mutable field differs between two payloads.

    Values are compared by their JSON encoding, the form payloads are
    stored in: ``920`` and ``"920"`` differ, a list and a tuple of the same
    items do not.
    """
    fields = MUTABLE_FIELDS[SourceType(source_type)]
    return any(_encoded(previous.get(f)) != _encoded(current.get(f)) for f in fields)


def _encoded(value) -> str:
    return json.dumps(value, sort_keys=True, default=str)
