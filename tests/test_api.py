"""HTTP surface tests: routing, payload shapes and error mapping."""
import uuid

from salon_scheduling.models import Appointment
from tests.conftest import add_appointment, at

CLIENT_ID = str(uuid.uuid4())


def iso(value):
    return value.isoformat().replace("+00:00", "Z")


def book(client, staff, service, starts_at, **extra):
    body = {
        "staff_id": str(staff.id),
        "client_id": CLIENT_ID,
        "service_id": str(service.id),
        "starts_at": iso(starts_at),
    }
    body.update(extra)
    return client.post("/api/v1/appointments", json=body)


class TestHealth:

    def test_basic_health(self, client):
        response = client.get("/health/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/health/", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestSlots:

    def test_lists_slots(self, client, staff, service, workday):
        response = client.get("/api/v1/slots", params={
            "service_id": str(service.id),
            "staff_id": str(staff.id),
            "from": iso(at(9)),
            "to": iso(at(10)),
        })
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["slots"][0]["staff_id"] == str(staff.id)
        assert body["slots"][0]["start"] == at(9).isoformat()
        assert body["slots"][0]["end"] == at(10).isoformat()

    def test_reversed_window_is_a_bad_request(self, client, service):
        response = client.get("/api/v1/slots", params={
            "service_id": str(service.id),
            "from": iso(at(10)),
            "to": iso(at(9)),
        })
        assert response.status_code == 400
        assert response.json() == {"detail": "'from' must be earlier than 'to'"}


class TestAppointments:

    def test_book_then_conflict(self, client, staff, service, workday):
        created = book(client, staff, service, at(9))
        assert created.status_code == 201
        body = created.json()
        assert body["price_service"] == 60.0
        assert body["price_addons"] == 0.0

        conflict = book(client, staff, service, at(9))
        assert conflict.status_code == 409
        assert conflict.json()["detail"] == "Selected slot is no longer available. Please pick another time."

    def test_unknown_add_on_is_a_bad_request(self, client, staff, service, workday):
        missing = str(uuid.uuid4())
        response = book(client, staff, service, at(9), add_on_ids=[missing])
        assert response.status_code == 400
        assert response.json()["detail"] == f"Unknown add-ons: {missing}"

    def test_unknown_appointment_is_not_found(self, client):
        response = client.get(f"/api/v1/appointments/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"detail": "Appointment not found"}

    def test_get_update_and_cancel(self, client, db, staff, service):
        appointment = add_appointment(db, staff, service, at(9), at(10))

        fetched = client.get(f"/api/v1/appointments/{appointment.id}")
        assert fetched.status_code == 200
        assert fetched.json()["commission_base"] == 60.0

        patched = client.patch(f"/api/v1/appointments/{appointment.id}", json={"discount": 10})
        assert patched.status_code == 200
        assert patched.json()["discount"] == 10.0
        assert patched.json()["commission_base"] == 50.0

        canceled = client.post(f"/api/v1/appointments/{appointment.id}/cancel", json={"reason": "Vet visit"})
        assert canceled.status_code == 200
        assert canceled.json()["status"] == "canceled"
        assert canceled.json()["notes"] == "Cancellation reason: Vet visit"

    def test_cancel_without_body(self, client, db, staff, service):
        appointment = add_appointment(db, staff, service, at(9), at(10))
        response = client.post(f"/api/v1/appointments/{appointment.id}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"

    def test_day_and_week_views(self, client, db, staff, service):
        add_appointment(db, staff, service, at(9), at(10))
        add_appointment(db, staff, service, at(9, day=2), at(10, day=2))

        day = client.get("/api/v1/appointments/day", params={"day": "2025-01-06"})
        assert day.status_code == 200
        assert day.json()["total_appointments"] == 1

        week = client.get("/api/v1/appointments/week", params={"week_start": "2025-01-06", "staff_id": str(staff.id)})
        assert week.status_code == 200
        assert week.json()["total_appointments"] == 2

    def test_reminder_for_unknown_appointment(self, client):
        response = client.post(f"/api/v1/appointments/{uuid.uuid4()}/reminder")
        assert response.status_code == 404

    def test_reminder_and_pickup_ready(self, client, db, staff, service):
        appointment = add_appointment(db, staff, service, at(9), at(10))

        reminder = client.post(f"/api/v1/appointments/{appointment.id}/reminder", json={})
        assert reminder.status_code == 202
        assert reminder.json() == {"status": "queued", "action": "appointment_reminder_queued"}

        pickup = client.post(f"/api/v1/appointments/{appointment.id}/pickup-ready")
        assert pickup.status_code == 202
        assert pickup.json()["action"] == "appointment_pickup_ready"


class TestReschedule:

    def test_full_flow(self, client, db, staff, service, workday):
        appointment_id = book(client, staff, service, at(9)).json()["id"]

        issued = client.post("/api/v1/reschedule/links", json={"appointment_id": appointment_id})
        assert issued.status_code == 201
        token = issued.json()["token"]
        assert issued.json()["url"].endswith(f"/book/reschedule/{token}")

        status = client.get(f"/api/v1/reschedule/links/{token}")
        assert status.status_code == 200
        assert status.json()["state"] == "active"

        applied = client.post("/api/v1/reschedule/apply", json={"token": token, "starts_at": iso(at(14))})
        assert applied.status_code == 200
        assert applied.json()["appointment"]["starts_at"] == at(14).isoformat()
        assert applied.json()["appointment"]["ends_at"] == at(15).isoformat()

        again = client.post("/api/v1/reschedule/apply", json={"token": token, "starts_at": iso(at(15))})
        assert again.status_code == 410
        assert again.json()["detail"] == "Reschedule link has already been used. Please request a new link."

        stored = db.query(Appointment).filter(Appointment.id == uuid.UUID(appointment_id)).one()
        assert stored.starts_at == at(14)

    def test_unknown_token(self, client):
        response = client.post("/api/v1/reschedule/apply", json={
            "token": "no-such-token-anywhere",
            "starts_at": iso(at(14)),
        })
        assert response.status_code == 404
        assert response.json() == {"detail": "Reschedule link could not be located."}

    def test_taken_slot(self, client, db, staff, service, workday):
        appointment_id = book(client, staff, service, at(9)).json()["id"]
        book(client, staff, service, at(14))
        token = client.post("/api/v1/reschedule/links", json={"appointment_id": appointment_id}).json()["token"]

        response = client.post("/api/v1/reschedule/apply", json={
            "token": token,
            "starts_at": iso(at(14)),
            "service_id": str(service.id),
            "staff_id": str(staff.id),
        })
        assert response.status_code == 409

    def test_link_for_unknown_appointment(self, client):
        response = client.post("/api/v1/reschedule/links", json={"appointment_id": str(uuid.uuid4())})
        assert response.status_code == 404


def test_register_push_token(client):
    response = client.post("/api/v1/notifications/register", json={
        "user_id": str(uuid.uuid4()),
        "platform": "web",
        "token": "web-push-token-0123456789abcdef",
    })
    assert response.status_code == 201
    assert response.json()["platform"] == "web"


def test_reschedule_tokens_are_redacted_from_logged_paths():
    from salon_scheduling.core.middleware import redact_path

    assert redact_path("/api/v1/reschedule/links/abcDEF123-_xyz") == "/api/v1/reschedule/links/<token>"
    assert redact_path("/api/v1/appointments/day") == "/api/v1/appointments/day"


def test_detailed_health_reports_catalog(client, monkeypatch, workday, service):
    from salon_scheduling.core import monitoring

    async def broker_ok(url):
        return None

    monkeypatch.setattr(monitoring, "_check_broker", broker_ok)

    body = client.get("/health/detailed").json()
    assert body["database"] == "healthy"
    assert body["broker"] == "healthy"
    assert body["catalog"] == {"active_services": 1, "availability_rules": 1}
    assert body["overall"] == "healthy"
