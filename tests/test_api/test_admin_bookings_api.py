"""Tests for admin booking management and booking reports."""

import uuid

import pytest
from httpx import AsyncClient

from stayhub.models.user import User

pytestmark = pytest.mark.asyncio


class TestList:
    async def test_filters(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking, make_user
    ) -> None:
        await make_booking(customer, hotel, status="pending", priority="urgent")
        await make_booking(customer, hotel, status="confirmed", start_offset=60)
        other = await make_user("customer")
        await make_booking(other, hotel, status="pending", start_offset=90)

        response = await client.get("/api/admin/bookings", headers=admin_headers)
        assert response.json()["pagination"]["total_count"] == 3

        response = await client.get("/api/admin/bookings", params={"status": "pending"}, headers=admin_headers)
        assert response.json()["pagination"]["total_count"] == 2

        response = await client.get("/api/admin/bookings", params={"priority": "urgent"}, headers=admin_headers)
        assert response.json()["pagination"]["total_count"] == 1

        response = await client.get(
            "/api/admin/bookings", params={"user_id": str(other.id)}, headers=admin_headers
        )
        assert [b["user"]["id"] for b in response.json()["bookings"]] == [str(other.id)]

    async def test_customer_forbidden(self, client: AsyncClient, customer_headers: dict) -> None:
        response = await client.get("/api/admin/bookings", headers=customer_headers)
        assert response.status_code == 403


class TestReports:
    async def test_stats(self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking) -> None:
        await make_booking(customer, hotel, status="confirmed", nights=2)
        response = await client.get("/api/admin/bookings/stats", params={"period": "7d"}, headers=admin_headers)
        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["total_bookings"] == 1
        assert summary["total_revenue"] == 400.0

    async def test_revenue_group_by_validated(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.get("/api/admin/bookings/revenue", params={"group_by": "week"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["group_by"] == "week"

        response = await client.get(
            "/api/admin/bookings/revenue", params={"group_by": "decade"}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_performance_counts_assigned_bookings(
        self, client: AsyncClient, admin: User, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel, status="confirmed")
        await client.put(
            f"/api/admin/bookings/{booking.id}/assign", json={"assigned_to": str(admin.id)}, headers=admin_headers
        )
        response = await client.get("/api/admin/bookings/performance", headers=admin_headers)
        rows = response.json()["admin_performance"]
        assert len(rows) == 1
        assert rows[0]["admin_email"] == admin.email
        assert rows[0]["confirmation_rate"] == 100.0


class TestExport:
    async def test_csv(self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking) -> None:
        booking = await make_booking(customer, hotel, status="confirmed")
        response = await client.get("/api/admin/bookings/export", params={"format": "csv"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "bookings.csv" in response.headers["content-disposition"]
        header, row = response.text.splitlines()
        assert header.startswith('"Booking ID","Guest Name"')
        assert row.startswith(f'"{booking.id}","Ada Lovelace","ada@test.com","Seaside Grand"')

    async def test_json(self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking) -> None:
        await make_booking(customer, hotel, status="cancelled")
        await make_booking(customer, hotel, status="pending", start_offset=60)
        response = await client.get(
            "/api/admin/bookings/export", params={"status": "cancelled"}, headers=admin_headers
        )
        data = response.json()
        assert data["message"] == "Bookings exported successfully"
        assert data["count"] == 1
        assert data["bookings"][0]["status"] == "cancelled"


class TestSingleBooking:
    async def test_get(self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking) -> None:
        booking = await make_booking(customer, hotel)
        response = await client.get(f"/api/admin/bookings/{booking.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["hotel"]["name"] == "Seaside Grand"

        response = await client.get(f"/api/admin/bookings/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    async def test_status_with_notes(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel, status="pending")
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/status",
            json={"status": "confirmed", "notes": "Paid at desk"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["booking"]
        assert data["status"] == "confirmed"
        assert data["confirmed_at"] is not None
        assert data["notes"].endswith("Paid at desk")

    async def test_assign_requires_admin(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel)
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/assign", json={"assigned_to": str(customer.id)}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid admin user"

    async def test_assign(
        self, client: AsyncClient, admin: User, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel)
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/assign", json={"assigned_to": str(admin.id)}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["booking"]["assigned_to"]["id"] == str(admin.id)

    async def test_priority(self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking) -> None:
        booking = await make_booking(customer, hotel)
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/priority", json={"priority": "high"}, headers=admin_headers
        )
        assert response.json()["booking"]["priority"] == "high"

        response = await client.put(
            f"/api/admin/bookings/{booking.id}/priority", json={"priority": "whenever"}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_cancel_then_refund(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel, status="confirmed")
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/cancel",
            json={"reason": "Overbooked", "refund_amount": "600.00"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        cancellation = response.json()["booking"]["cancellation"]
        assert cancellation["reason"] == "Overbooked"
        assert cancellation["refund_status"] == "pending"

        again = await client.put(f"/api/admin/bookings/{booking.id}/cancel", json={}, headers=admin_headers)
        assert again.status_code == 400
        assert again.json()["detail"] == "Booking is already cancelled"

        response = await client.put(
            f"/api/admin/bookings/{booking.id}/refund", json={"refund_status": "completed"}, headers=admin_headers
        )
        assert response.status_code == 200
        cancellation = response.json()["booking"]["cancellation"]
        assert cancellation["refund_status"] == "completed"
        assert cancellation["refunded_at"] is not None

    async def test_refund_requires_cancellation(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel, status="confirmed")
        response = await client.put(
            f"/api/admin/bookings/{booking.id}/refund", json={"refund_status": "completed"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only cancelled bookings can be refunded"

    async def test_notes_are_appended(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel)
        await client.post(f"/api/admin/bookings/{booking.id}/notes", json={"notes": "Late arrival"}, headers=admin_headers)
        response = await client.post(
            f"/api/admin/bookings/{booking.id}/notes", json={"notes": "Needs cot"}, headers=admin_headers
        )
        assert response.json()["message"] == "Notes added successfully"
        notes = response.json()["booking"]["notes"]
        assert "Late arrival" in notes
        assert notes.endswith("Needs cot")

    async def test_blank_notes_rejected(
        self, client: AsyncClient, admin_headers: dict, customer: User, hotel, make_booking
    ) -> None:
        booking = await make_booking(customer, hotel)
        response = await client.post(
            f"/api/admin/bookings/{booking.id}/notes", json={"notes": "   "}, headers=admin_headers
        )
        assert response.status_code == 400
