from datetime import timedelta

from fastapi.testclient import TestClient

from app import app
from factories import auth_headers, create_test_client, create_test_reservation, create_test_table, future
from models import *

client = TestClient(app)


def _payload(table_id, client_id, start, minutes=120, party_size=2, **extra):
    payload = {
        "table_id": table_id,
        "client_id": client_id,
        "start": start.isoformat(),
        "duration_minutes": minutes,
        "party_size": party_size,
    }
    payload.update(extra)
    return payload


# =========================================================
# TEST: GET /table-reservations
# =========================================================
def test_get_table_reservations(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    create_test_reservation(db, table.id, guest.id, future())

    response = client.get("/table-reservations", headers=headers)
    assert response.status_code == 200

    data = response.json()
    assert len(data) == 1
    assert data[0]["duration_minutes"] == 120
    assert data[0]["status"] == "Pending"


def test_get_table_reservations_requires_token():
    response = client.get("/table-reservations")
    assert response.status_code == 401


def test_get_table_reservations_invalid_sort(db):
    headers = auth_headers(db)

    response = client.get("/table-reservations?sort_by=customer_name", headers=headers)
    assert response.status_code == 422


# =========================================================
# TEST: GET /table-reservations/{id}
# =========================================================
def test_get_table_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db, "T7")
    guest = create_test_client(db)
    reservation = create_test_reservation(db, table.id, guest.id, future())

    response = client.get(f"/table-reservations/{reservation.id}", headers=headers)
    assert response.status_code == 200

    data = response.json()
    assert data["table"]["number"] == "T7"
    assert data["client"]["email"] == "ana@mail.com"


def test_get_table_reservation_not_found(db):
    headers = auth_headers(db)

    response = client.get("/table-reservations/999", headers=headers)
    assert response.status_code == 404


# =========================================================
# TEST: POST /table-reservations
# =========================================================
def test_create_table_reservation(db):
    headers = auth_headers(db, "waiter", role="User")
    table = create_test_table(db)
    guest = create_test_client(db)
    start = future()

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, start, notes="Terrace"), headers=headers)
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["reservation"]["status"] == "Pending"
    assert data["reservation"]["notes"] == "Terrace"

    db.refresh(guest)
    assert guest.loyalty_points == 10
    assert guest.visit_count == 1


def test_create_table_reservation_with_timezone(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    start = future()
    aware = (start + timedelta(hours=2)).isoformat() + "+02:00"

    response = client.post("/table-reservations", json=dict(_payload(table.id, guest.id, start), start=aware), headers=headers)
    assert response.status_code == 200

    db.expire_all()
    stored = db.query(TableReservationDB).one()
    assert stored.start == start


def test_create_table_reservation_conflict(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    start = future()
    create_test_reservation(db, table.id, guest.id, start)

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, start + timedelta(minutes=90)), headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"


def test_create_table_reservation_touching(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    start = future()
    create_test_reservation(db, table.id, guest.id, start)

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, start + timedelta(hours=2)), headers=headers)
    assert response.status_code == 200


def test_create_table_reservation_capacity(db):
    headers = auth_headers(db)
    table = create_test_table(db, capacity=2)
    guest = create_test_client(db)

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, future(), party_size=3), headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "CAPACITY_EXCEEDED"


def test_create_table_reservation_invalid_duration(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, future(), minutes=-30), headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_DURATION"


def test_create_table_reservation_duration_too_long(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)

    response = client.post("/table-reservations", json=_payload(table.id, guest.id, future(), minutes=1400000000000), headers=headers)
    assert response.status_code == 422

    db.refresh(guest)
    assert guest.loyalty_points == 0


def test_create_table_reservation_unknown_table(db):
    headers = auth_headers(db)
    guest = create_test_client(db)

    response = client.post("/table-reservations", json=_payload(999, guest.id, future()), headers=headers)
    assert response.status_code == 404


# =========================================================
# TEST: GET /table-reservations/available
# =========================================================
def test_get_available_tables(db):
    headers = auth_headers(db)
    create_test_table(db, "T3", capacity=3)
    create_test_table(db, "T6", capacity=6)
    create_test_table(db, "T5", capacity=5)
    params = {"party_size": 4, "start": future().isoformat(), "duration_minutes": 90}

    response = client.get("/table-reservations/available", params=params, headers=headers)
    assert response.status_code == 200
    assert [t["number"] for t in response.json()] == ["T5", "T6"]


def test_get_available_tables_duration_too_long(db):
    headers = auth_headers(db)
    create_test_table(db)
    params = {"party_size": 2, "start": future().isoformat(), "duration_minutes": 1400000000000}

    response = client.get("/table-reservations/available", params=params, headers=headers)
    assert response.status_code == 422


def test_get_available_tables_in_past(db):
    headers = auth_headers(db)
    create_test_table(db)
    params = {"party_size": 2, "start": (future(days=-2)).isoformat(), "duration_minutes": 90}

    response = client.get("/table-reservations/available", params=params, headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ARGUMENT"


# =========================================================
# TEST: PUT/PATCH /table-reservations/{id}
# =========================================================
def test_update_table_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    start = future()
    reservation = create_test_reservation(db, table.id, guest.id, start)

    payload = _payload(table.id, guest.id, start + timedelta(minutes=30), minutes=90, status="Confirmed")
    response = client.put(f"/table-reservations/{reservation.id}", json=payload, headers=headers)
    assert response.status_code == 200

    data = response.json()["reservation"]
    assert data["status"] == "Confirmed"
    assert data["duration_minutes"] == 90


def test_patch_table_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    reservation = create_test_reservation(db, table.id, guest.id, future())

    response = client.patch(f"/table-reservations/{reservation.id}", json={"notes": "Allergy: nuts"}, headers=headers)
    assert response.status_code == 200

    data = response.json()["reservation"]
    assert data["notes"] == "Allergy: nuts"
    assert data["party_size"] == 2


def test_patch_completed_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    reservation = create_test_reservation(db, table.id, guest.id, future(), status=ReservationStatus.COMPLETED)

    response = client.patch(f"/table-reservations/{reservation.id}", json={"party_size": 3}, headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "RESERVATION_CLOSED"


# =========================================================
# TEST: POST /table-reservations/{id}/cancel
# =========================================================
def test_cancel_table_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db, loyalty_points=10)
    reservation = create_test_reservation(db, table.id, guest.id, future())

    response = client.post(f"/table-reservations/{reservation.id}/cancel", headers=headers)
    assert response.status_code == 200
    assert response.json()["reservation"]["status"] == "Cancelled"

    response = client.post(f"/table-reservations/{reservation.id}/cancel", headers=headers)
    assert response.status_code == 400
    assert response.json()["code"] == "ALREADY_CANCELLED"

    db.refresh(guest)
    assert guest.loyalty_points == 5


# =========================================================
# TEST: DELETE /table-reservations/{id}
# =========================================================
def test_delete_table_reservation(db):
    headers = auth_headers(db)
    table = create_test_table(db)
    guest = create_test_client(db)
    reservation = create_test_reservation(db, table.id, guest.id, future())

    response = client.delete(f"/table-reservations/{reservation.id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = client.delete(f"/table-reservations/{reservation.id}", headers=headers)
    assert response.status_code == 404
