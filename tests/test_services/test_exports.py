"""Tests for CSV/JSON export rendering."""

import csv
import io
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.services.exports import (
    BOOKING_COLUMNS,
    USER_COLUMNS,
    booking_row,
    csv_response,
    json_export,
    record_row,
    to_csv,
    user_row,
)
from stayhub.services.user_service import record_behavior


class TestToCsv:
    def test_header_then_quoted_rows(self):
        text = to_csv([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])
        assert text == '"a","b"\n"1","x"\n"2","y"\n'

    def test_explicit_fieldnames_fill_missing_cells(self):
        text = to_csv([{"a": 1}], fieldnames=["a", "b"])
        assert text.splitlines()[1] == '"1",""'

    def test_embedded_quotes_and_newlines_round_trip(self):
        note = 'He said "late check-in"\nthen left'
        text = to_csv([{"note": note}])
        rows = list(csv.DictReader(io.StringIO(text)))
        assert rows == [{"note": note}]

    def test_cell_conversions(self):
        row = {
            "when": date(2026, 3, 1),
            "at": datetime(2026, 3, 1, 12, 30),
            "money": Decimal("10.50"),
            "tags": ["wifi", "pool"],
            "id": uuid.UUID("00000000-0000-0000-0000-000000000001"),
        }
        parsed = next(csv.DictReader(io.StringIO(to_csv([row]))))
        assert parsed["when"] == "2026-03-01"
        assert parsed["at"] == "2026-03-01T12:30:00"
        assert parsed["money"] == "10.50"
        assert parsed["tags"] == '["wifi", "pool"]'
        assert parsed["id"] == "00000000-0000-0000-0000-000000000001"


class TestResponses:
    def test_csv_response_headers(self):
        response = csv_response([{"a": 1}], "bookings")
        assert response.media_type == "text/csv"
        assert response.headers["content-disposition"] == "attachment; filename=bookings.csv"

    def test_json_export_shape(self):
        payload = json_export("Done", "items", [{"id": uuid.UUID(int=1)}], type="user_behavior")
        assert payload["message"] == "Done"
        assert payload["type"] == "user_behavior"
        assert payload["count"] == 1
        assert payload["items"] == [{"id": "00000000-0000-0000-0000-000000000001"}]


class TestRows:
    async def test_booking_row(self, db_session: AsyncSession, customer, hotel, make_booking):
        booking = await make_booking(customer, hotel, status="confirmed")
        row = booking_row(booking)
        assert list(row) == BOOKING_COLUMNS
        assert row["Guest Name"] == "Ada Lovelace"
        assert row["Guest Email"] == "ada@test.com"
        assert row["Hotel"] == "Seaside Grand"
        assert row["Assigned Admin"] == ""

    async def test_user_row(self, db_session: AsyncSession, make_user):
        user = await make_user("customer", is_active=False, phone="555-0100")
        row = user_row(user)
        assert list(row) == USER_COLUMNS
        assert row["Status"] == "Inactive"
        assert row["Phone"] == "555-0100"

    async def test_record_row_uses_column_names(self, db_session: AsyncSession, customer):
        entry = await record_behavior(db_session, customer.id, "searched", metadata={"page": 1})
        row = record_row(entry)
        assert row["metadata"] == {"page": 1}
        assert row["action"] == "searched"
        assert "metadata_" not in row
