from fastapi.testclient import TestClient

from config import Settings
from helpers import OWNER
from main import create_app


def booking_body(room="room-1", start="2030-01-01T10:00:00Z", end="2030-01-01T11:00:00Z", **overrides):
    body = {"room": room, "startTime": start, "endTime": end, **OWNER}
    body.update(overrides)
    return body


def test_create_booking_success(client):
    response = client.post("/api/bookings", json=booking_body())
    assert response.status_code == 201
    data = response.json()
    assert data["id"]
    assert data["room"] == "room-1"
    assert data["startTime"] == "2030-01-01T10:00:00.000Z"
    assert data["endTime"] == "2030-01-01T11:00:00.000Z"
    assert data["createdAt"]
    assert data["user"] == OWNER["user"]


def test_create_booking_start_not_before_end(client):
    response = client.post(
        "/api/bookings",
        json=booking_body(start="2030-01-01T12:00:00Z", end="2030-01-01T11:00:00Z"),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "End time must be after start time"


def test_create_booking_start_in_past(client):
    response = client.post(
        "/api/bookings",
        json=booking_body(start="2000-01-01T10:00:00Z", end="2000-01-01T11:00:00Z"),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot book rooms before current date"


def test_create_booking_overlap_conflict(client):
    client.post("/api/bookings", json=booking_body())
    response = client.post(
        "/api/bookings",
        json=booking_body(start="2030-01-01T10:30:00Z", end="2030-01-01T11:30:00Z"),
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "This room is already booked for the selected time period"
    assert len(client.get("/api/bookings").json()) == 1


def test_create_booking_back_to_back_no_conflict(client):
    client.post("/api/bookings", json=booking_body())
    response = client.post(
        "/api/bookings",
        json=booking_body(start="2030-01-01T11:00:00Z", end="2030-01-01T12:00:00Z"),
    )
    assert response.status_code == 201
    assert response.json()["startTime"] == "2030-01-01T11:00:00.000Z"


def test_same_time_different_rooms_no_conflict(client):
    client.post("/api/bookings", json=booking_body(room="room-1"))
    response = client.post("/api/bookings", json=booking_body(room="room-2"))
    assert response.status_code == 201
    assert response.json()["room"] == "room-2"


def test_create_booking_invalid_fields(client):
    assert client.post("/api/bookings", json=booking_body(start="not a date")).status_code == 422
    assert client.post("/api/bookings", json=booking_body(email="nope")).status_code == 422
    assert client.post("/api/bookings", json=booking_body(user="   ")).status_code == 422
    body = booking_body()
    del body["phone"]
    assert client.post("/api/bookings", json=body).status_code == 422


def test_create_booking_unknown_room(client):
    response = client.post("/api/bookings", json=booking_body(room="room-99"))
    assert response.status_code == 400
    assert response.json()["detail"] == "unknown room 'room-99'"


def test_get_booking(client):
    created = client.post("/api/bookings", json=booking_body()).json()
    response = client.get(f"/api/bookings/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_get_booking_not_found(client):
    response = client.get("/api/bookings/non_existent_booking")
    assert response.status_code == 404
    assert response.json()["detail"] == "Booking not found"


def test_update_booking(client):
    created = client.post("/api/bookings", json=booking_body()).json()
    response = client.put(
        f"/api/bookings/{created['id']}",
        json={"startTime": "2030-01-01T10:00:00Z", "endTime": "2030-01-01T12:00:00Z", "phone": "999"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["createdAt"] == created["createdAt"]
    assert data["endTime"] == "2030-01-01T12:00:00.000Z"
    assert data["phone"] == "999"


def test_update_booking_into_conflict(client):
    x = client.post(
        "/api/bookings",
        json=booking_body(start="2030-01-01T09:00:00Z", end="2030-01-01T10:00:00Z"),
    ).json()
    client.post("/api/bookings", json=booking_body())

    response = client.put(
        f"/api/bookings/{x['id']}",
        json={"startTime": "2030-01-01T09:30:00Z", "endTime": "2030-01-01T10:30:00Z"},
    )
    assert response.status_code == 409
    assert client.get(f"/api/bookings/{x['id']}").json() == x


def test_update_booking_not_found(client):
    response = client.put("/api/bookings/missing", json={"user": "x"})
    assert response.status_code == 404


def test_list_bookings_for_room(client):
    client.post("/api/bookings", json=booking_body(start="2030-01-03T12:00:00Z", end="2030-01-03T13:00:00Z"))
    client.post("/api/bookings", json=booking_body(start="2030-01-03T10:00:00Z", end="2030-01-03T11:00:00Z"))
    client.post("/api/bookings", json=booking_body(room="room-2"))

    response = client.get("/api/rooms/room-1/bookings")
    assert response.status_code == 200
    data = response.json()
    assert [b["startTime"] for b in data] == ["2030-01-03T10:00:00.000Z", "2030-01-03T12:00:00.000Z"]


def test_list_bookings_empty_room(client):
    response = client.get("/api/rooms/room-3/bookings")
    assert response.status_code == 200
    assert response.json() == []


def test_delete_booking(client):
    created = client.post("/api/bookings", json=booking_body()).json()
    assert client.delete(f"/api/bookings/{created['id']}").status_code == 204
    assert client.delete(f"/api/bookings/{created['id']}").status_code == 404


def test_bookings_survive_restart(data_file):
    settings = Settings(data_file=data_file)
    with TestClient(create_app(settings)) as first:
        created = first.post("/api/bookings", json=booking_body()).json()

    with TestClient(create_app(settings)) as second:
        assert second.get("/api/bookings").json() == [created]


def test_persistence_failure_returns_500(client):
    class BrokenMirror:
        def write_all(self, bookings):
            raise OSError("read-only filesystem")

    repo = client.app.state.repository
    repo.list()
    repo._mirror = BrokenMirror()

    response = client.post("/api/bookings", json=booking_body())
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save bookings"
    assert client.get("/api/bookings").json() == []
