"""CSV and JSON rendering for admin exports."""

import csv
import io
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response
from sqlalchemy import inspect

from stayhub.models.booking import Booking
from stayhub.models.user import User

EXPORT_FORMATS = ("json", "csv")


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(jsonable_encoder(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def to_csv(rows: list[dict[str, Any]], fieldnames: list[str] | None = None) -> str:
    """Header row plus one quoted line per row.

    Embedded quotes and newlines are escaped by the csv writer.
    """
    if fieldnames is None:
        fieldnames = list(rows[0].keys()) if rows else []
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=fieldnames,
        quoting=csv.QUOTE_ALL,
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _cell(row.get(key)) for key in fieldnames})
    return buffer.getvalue()


def csv_response(rows: list[dict[str, Any]], filename: str, fieldnames: list[str] | None = None) -> Response:
    return Response(
        content=to_csv(rows, fieldnames),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
    )


def json_export(message: str, key: str, items: list[Any], **extra: Any) -> dict[str, Any]:
    return {"message": message, **extra, "count": len(items), key: jsonable_encoder(items)}


def record_row(record: Any) -> dict[str, Any]:
    """Column values of any mapped record, keyed by column name."""
    mapper = inspect(record).mapper
    return {attr.columns[0].name: getattr(record, attr.key) for attr in mapper.column_attrs}


# ---------------------------------------------------------------------------
# Flattened rows
# ---------------------------------------------------------------------------

BOOKING_COLUMNS = [
    "Booking ID",
    "Guest Name",
    "Guest Email",
    "Hotel",
    "Location",
    "Check-in",
    "Check-out",
    "Status",
    "Total Amount",
    "Created Date",
    "Assigned Admin",
]

USER_COLUMNS = [
    "User ID",
    "Username",
    "Email",
    "First Name",
    "Last Name",
    "Role",
    "Status",
    "Phone",
    "Address",
    "Date of Birth",
    "Total Bookings",
    "Total Spent",
    "Average Rating",
    "Last Active",
    "Created Date",
]


def booking_row(booking: Booking) -> dict[str, Any]:
    guest = (booking.guest_info or [{}])[0]
    assignee = booking.assigned_to
    return {
        "Booking ID": str(booking.id),
        "Guest Name": f"{guest.get('first_name') or ''} {guest.get('last_name') or ''}".strip(),
        "Guest Email": guest.get("email") or "",
        "Hotel": booking.hotel.name if booking.hotel else "",
        "Location": booking.hotel.location if booking.hotel else "",
        "Check-in": booking.start_date,
        "Check-out": booking.end_date,
        "Status": booking.status,
        "Total Amount": booking.total_amount,
        "Created Date": booking.created_at,
        "Assigned Admin": assignee.full_name if assignee else "",
    }


def user_row(user: User) -> dict[str, Any]:
    return {
        "User ID": str(user.id),
        "Username": user.username,
        "Email": user.email,
        "First Name": user.first_name,
        "Last Name": user.last_name,
        "Role": user.role,
        "Status": "Active" if user.is_active else "Inactive",
        "Phone": user.phone,
        "Address": user.address,
        "Date of Birth": user.date_of_birth,
        "Total Bookings": user.total_bookings,
        "Total Spent": user.total_spent,
        "Average Rating": user.average_rating,
        "Last Active": user.last_active,
        "Created Date": user.created_at,
    }
