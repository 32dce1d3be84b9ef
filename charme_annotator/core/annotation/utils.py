"""
Pure utility functions for annotation logic.

These functions have no side effects and can be tested in isolation.
"""

import html
from datetime import datetime, timezone
from typing import Union

from .state import AnnotationRecord


def format_coordinate(value: Union[int, float]) -> str:
    """
    Render a coordinate the way the map front end prints numbers.

    Integral values lose their fractional part (``55.0`` -> ``55``), other
    values use the shortest round-trip representation.

    Args:
        value: Longitude or latitude

    Returns:
        Coordinate text
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as ISO 8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC already.

    Returns:
        e.g. ``2024-01-02T03:04:05.000Z``
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def author_display_name(record: AnnotationRecord) -> str:
    """Best available display name for the author of a record."""
    if record.firstname and record.surname:
        return f"{record.firstname} {record.surname}"
    return record.name or ""


def default_annotation_formatter(record: AnnotationRecord) -> str:
    """
    Build the popup HTML for a stored annotation.

    Comment text first, then the time it was made, then the author's name,
    linked to their mailbox when an email address is known.

    Args:
        record: Query result row

    Returns:
        HTML snippet
    """
    parts = []
    if record.text:
        parts.append(html.escape(record.text) + "<br><br>")
    if record.time:
        parts.append(f"Annotated at {html.escape(record.time)} by:<br>")

    name = author_display_name(record)
    if name:
        label = f"<b>{html.escape(name)}</b>"
        if record.email:
            email = html.escape(record.email, quote=True)
            label = f'<a href="mailto:{email}">{label}</a>'
        parts.append(label + "<br>")

    return "".join(parts)
