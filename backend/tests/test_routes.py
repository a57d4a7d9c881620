# Overview: Pytest coverage for the HTTP surface: status codes, payloads and headers.

"""
API Route Tests

Uses the Flask test client end to end. Bookings go through the real clock,
so the booked day (2030-01-07) is safely beyond any lead time.
"""

from conftest import MONDAY


def book_payload(store, staff, service, **overrides):
    payload = {
        "slug": store.slug,
        "staffId": staff.id,
        "serviceId": service.id,
        "date": MONDAY.isoformat(),
        "time": "10:00",
        "customerName": "Ana Silva",
        "customerPhone": "912 345 678",
    }
    payload.update(overrides)
    return payload


class TestPublicRoutes:
    def test_public_catalog(self, client, db_session, store, staff, service, other_staff):
        staff_resp = client.get(f"/api/public/staff?slug={store.slug}")
        services_resp = client.get(f"/api/public/services?slug={store.slug}")

        assert staff_resp.status_code == 200
        assert staff_resp.json["staff"] == [{"id": staff.id, "name": "Ana"}]
        assert services_resp.json["services"][0]["name"] == "Corte"

    def test_catalog_unknown_store_is_404(self, client, db_session):
        resp = client.get("/api/public/staff?slug=missing")
        assert resp.status_code == 404
        assert resp.json["error"] == "Store not found"

    def test_availability(self, client, db_session, store, staff, monday_schedule):
        resp = client.get(
            f"/api/availability?slug={store.slug}&staffId={staff.id}&date={MONDAY.isoformat()}&serviceMinutes=30"
        )

        assert resp.status_code == 200
        assert resp.json["slots"][0] == "09:00"
        assert resp.json["slots"][-1] == "17:30"
        assert resp.headers["Cache-Control"] == "no-store, max-age=0"

    def test_availability_bad_input_is_400(self, client, db_session, store, staff, monday_schedule):
        resp = client.get(f"/api/availability?slug={store.slug}&staffId={staff.id}&date=07-01-2030")
        assert resp.status_code == 400
        assert "error" in resp.json
        assert resp.headers["Cache-Control"] == "no-store, max-age=0"

    def test_availability_oversized_numbers_are_400(self, client, db_session, store, staff, monday_schedule):
        base = f"/api/availability?slug={store.slug}&staffId={staff.id}&date={MONDAY.isoformat()}"

        lead = client.get(base + "&leadMinutes=1000000000000")
        buffer = client.get(base + "&bufferAfter=6000000000")

        assert lead.status_code == 400
        assert "leadMinutes" in lead.json["error"]
        assert buffer.status_code == 400
        assert "bufferAfter" in buffer.json["error"]

    def test_availability_foreign_staff_is_404(self, client, db_session, store, other_staff):
        resp = client.get(f"/api/availability?slug={store.slug}&staffId={other_staff.id}&date={MONDAY.isoformat()}")
        assert resp.status_code == 404

    def test_book_then_conflict(self, client, db_session, store, staff, service, monday_schedule):
        first = client.post("/api/book", json=book_payload(store, staff, service))
        second = client.post("/api/book", json=book_payload(store, staff, service, customerName="Rui"))

        assert first.status_code == 201
        assert first.json["ok"] is True
        assert first.json["appointment"]["time"] == "10:00"
        assert first.json["appointment"]["start_at"] == "2030-01-07T10:00:00Z"

        assert second.status_code == 409
        assert second.json["code"] == "SCHEDULING_CONFLICT"

        slots = client.get(
            f"/api/availability?slug={store.slug}&staffId={staff.id}&date={MONDAY.isoformat()}"
        ).json["slots"]
        assert "10:00" not in slots

    def test_book_validation_is_400(self, client, db_session, store, staff, service, monday_schedule):
        resp = client.post("/api/book", json=book_payload(store, staff, service, time="10:10"))
        assert resp.status_code == 400

    def test_book_oversized_lead_is_400(self, client, db_session, store, staff, service, monday_schedule):
        resp = client.post("/api/book", json=book_payload(store, staff, service, leadMinutes=10**12))
        assert resp.status_code == 400
        assert "leadMinutes" in resp.json["error"]

    def test_book_empty_body_is_400(self, client, db_session):
        resp = client.post("/api/book", data="not json", content_type="text/plain")
        assert resp.status_code == 400

    def test_book_foreign_service_is_404(self, client, db_session, store, staff, other_service, monday_schedule):
        resp = client.post("/api/book", json=book_payload(store, staff, other_service))
        assert resp.status_code == 404


class TestManagementRoutes:
    def test_store_setup_flow(self, client, db_session):
        store_resp = client.post("/api/stores", json={"name": "Estudio Sul", "timezone": "Europe/Lisbon"})
        assert store_resp.status_code == 201
        slug = store_resp.json["slug"]
        assert slug == "estudio-sul"

        staff_resp = client.post(f"/api/stores/{slug}/staff", json={"name": "Marta"})
        assert staff_resp.status_code == 201
        staff_id = staff_resp.json["staff"]["id"]

        service_resp = client.post(f"/api/stores/{slug}/services", json={"name": "Corte", "duration_minutes": 45})
        assert service_resp.status_code == 201

        hours_resp = client.put(
            f"/api/stores/{slug}/staff/{staff_id}/working-hours/0",
            json={"shifts": [{"is_open": True, "start": "09:00", "end": "12:00"}]},
        )
        assert hours_resp.status_code == 200
        assert hours_resp.json["shifts"][0]["start"] == "09:00"

        week = client.get(f"/api/stores/{slug}/staff/{staff_id}/working-hours").json
        assert week["days"]["0"][0]["end"] == "12:00"
        assert week["days"]["1"] == []

        avail = client.get(f"/api/availability?slug={slug}&staffId={staff_id}&date={MONDAY.isoformat()}&serviceMinutes=45")
        assert avail.json["slots"][-1] == "11:15"

    def test_duplicate_store_is_409(self, client, db_session, store):
        resp = client.post("/api/stores", json={"name": "Copy", "slug": store.slug})
        assert resp.status_code == 409
        assert "code" not in resp.json

    def test_invalid_hours_is_400(self, client, db_session, store, staff):
        resp = client.put(
            f"/api/stores/{store.slug}/staff/{staff.id}/working-hours/0",
            json={"shifts": [{"start": "18:00", "end": "09:00"}]},
        )
        assert resp.status_code == 400

    def test_blocks_crud(self, client, db_session, store, staff):
        created = client.post(f"/api/stores/{store.slug}/blocks", json={
            "start_at": "2030-01-07T14:00:00Z",
            "end_at": "2030-01-07T16:00:00Z",
            "staff_id": staff.id,
            "reason": "Dentista",
        })
        assert created.status_code == 201
        block_id = created.json["block"]["id"]

        listed = client.get(f"/api/stores/{store.slug}/blocks?staffId={staff.id}")
        assert [b["id"] for b in listed.json["blocks"]] == [block_id]

        assert client.delete(f"/api/stores/{store.slug}/blocks/{block_id}").status_code == 200
        assert client.delete(f"/api/stores/{store.slug}/blocks/{block_id}").status_code == 404

    def test_list_and_cancel_appointments(self, client, db_session, store, staff, service, monday_schedule):
        booked = client.post("/api/book", json=book_payload(store, staff, service)).json
        appointment_id = booked["appointment"]["id"]

        listed = client.get(f"/api/stores/{store.slug}/appointments?date={MONDAY.isoformat()}")
        assert [a["id"] for a in listed.json["appointments"]] == [appointment_id]

        cancel = client.post(
            f"/api/stores/{store.slug}/appointments/{appointment_id}/cancel", json={"reason": "Cliente ligou"}
        )
        assert cancel.status_code == 200
        assert cancel.json["appointment"]["status"] == "cancelled"

        again = client.post(f"/api/stores/{store.slug}/appointments/{appointment_id}/cancel")
        assert again.status_code == 409

        listed = client.get(f"/api/stores/{store.slug}/appointments?date={MONDAY.isoformat()}")
        assert listed.json["appointments"] == []
        with_cancelled = client.get(
            f"/api/stores/{store.slug}/appointments?date={MONDAY.isoformat()}&includeCancelled=true"
        )
        assert len(with_cancelled.json["appointments"]) == 1

    def test_remove_staff_with_history_is_409(self, client, db_session, store, staff, service, monday_schedule):
        client.post("/api/book", json=book_payload(store, staff, service))
        resp = client.delete(f"/api/stores/{store.slug}/staff/{staff.id}")
        assert resp.status_code == 409


class TestSystemRoutes:
    def test_health(self, client, db_session, store):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["checks"]["database"]["details"]["stores"] == 1

    def test_version(self, client, db_session):
        resp = client.get("/version")
        assert resp.status_code == 200
        assert resp.json["api_version"] == "1.0.0"
