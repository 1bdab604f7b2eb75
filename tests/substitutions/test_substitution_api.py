from datetime import date, timedelta


def _payload(start: date, end: date, **extra) -> dict:
    body = {
        "group_id": 10,
        "regular_staff_id": 2,
        "substitute_staff_id": 3,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "reason": "Krankheitsvertretung",
    }
    body.update(extra)
    return body


def test_requires_login(client):
    res = client.get("/substitutions")

    assert res.status_code == 401
    assert res.get_json()["error"] == "unauthorized"


def test_staff_can_read_but_not_create(staff_client):
    start = date.today() + timedelta(days=1)

    assert staff_client.get("/substitutions").status_code == 200
    res = staff_client.post("/substitutions", json=_payload(start, start))
    assert res.status_code == 403
    assert res.get_json()["error"] == "forbidden"


def test_admin_crud(admin_client):
    start = date.today() + timedelta(days=1)
    end = start + timedelta(days=2)

    created = admin_client.post("/substitutions", json=_payload(start, end))
    assert created.status_code == 201
    body = created.get_json()["data"]
    assert body["duration_days"] == 3
    assert body["is_active"] is False
    sub_id = body["id"]

    conflict = admin_client.post("/substitutions", json=_payload(end, end, group_id=11))
    assert conflict.status_code == 409
    assert conflict.get_json()["error"] == "conflict"

    active = admin_client.get(f"/substitutions/active?date={start.isoformat()}").get_json()["data"]
    assert [s["id"] for s in active] == [sub_id]
    assert active[0]["is_active"] is True

    listing = admin_client.get("/substitutions?page=1&page_size=10").get_json()["data"]
    assert listing["total"] == 1

    updated = admin_client.put(f"/substitutions/{sub_id}", json=_payload(start, start, reason="Kur"))
    assert updated.status_code == 200
    assert updated.get_json()["data"]["reason"] == "Kur"

    assert admin_client.delete(f"/substitutions/{sub_id}").status_code == 200
    assert admin_client.get(f"/substitutions/{sub_id}").status_code == 404


def test_create_validates_body(admin_client):
    res = admin_client.post("/substitutions", json={"group_id": 10, "substitute_staff_id": 3, "start_date": "soon"})

    assert res.status_code == 400
    assert res.get_json()["error"] == "invalid_request"
