from conftest import create_trip, make_plan, register


def test_new_trip_starts_empty(client, auth):
    trip = create_trip(client, auth)
    assert trip["status"] == "planning"
    assert trip["itinerary"] == []
    assert trip["budget"]["total"] == 20000
    assert trip["budget"]["spent"] == 0
    assert trip["budget"]["remaining"] == 20000
    assert trip["budget"]["currency"] == "INR"
    assert trip["summary"]["totalCost"] == 0


def test_client_spent_and_remaining_are_ignored(client, auth):
    trip = create_trip(client, auth, budget={"total": 5000, "spent": 4000, "remaining": 1})
    assert trip["budget"]["spent"] == 0
    assert trip["budget"]["remaining"] == 5000


def test_end_date_must_follow_start_date(client, auth):
    resp = client.post("/api/trips", headers=auth, json={
        "destination": "Goa", "startDate": "2025-11-05", "endDate": "2025-11-05",
        "budget": {"total": 100},
    })
    assert resp.status_code == 400


def test_list_and_get(client, auth):
    first = create_trip(client, auth, destination="Goa")
    second = create_trip(client, auth, destination="Leh")
    listed = client.get("/api/trips", headers=auth).json()
    assert [t["id"] for t in listed] == [second["id"], first["id"]]
    assert client.get(f"/api/trips/{first['id']}", headers=auth).json()["destination"] == "Goa"


def test_itinerary_edit_recomputes_totals(client, auth):
    trip = create_trip(client, auth)
    plan = make_plan((100, 50, 20), (200, 0, 30))
    resp = client.put(f"/api/trips/{trip['id']}/itinerary", headers=auth, json={"itinerary": plan["itinerary"]})
    assert resp.status_code == 200
    body = resp.json()
    assert [d["totalDayCost"] for d in body["itinerary"]] == [170, 230]
    assert body["summary"]["totalCost"] == 400
    assert body["budget"]["spent"] == 400
    assert body["budget"]["remaining"] == 19600


def test_invalid_itinerary_edit_rejected(client, auth):
    trip = create_trip(client, auth)
    plan = make_plan((1, 1, 1))
    plan["itinerary"][0]["day"] = 2
    resp = client.put(f"/api/trips/{trip['id']}/itinerary", headers=auth, json={"itinerary": plan["itinerary"]})
    assert resp.status_code == 400
    assert "contiguous" in resp.json()["message"]


def test_partial_update(client, auth):
    trip = create_trip(client, auth)
    resp = client.put(f"/api/trips/{trip['id']}", headers=auth, json={
        "budget": {"total": 30000, "spent": 1, "remaining": 2},
        "preferences": {"accommodationType": "homestay"},
        "summary": {"highlights": ["Nahargarh sunset"], "totalCost": 12345},
        "status": "confirmed",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["budget"] == {"total": 30000, "spent": 0, "remaining": 30000, "currency": "INR"}
    assert body["preferences"]["accommodationType"] == "homestay"
    assert body["preferences"]["travelStyle"] == "cultural"
    assert body["summary"]["highlights"] == ["Nahargarh sunset"]
    assert body["summary"]["totalCost"] == 0
    assert body["status"] == "confirmed"


def test_unknown_status_rejected(client, auth):
    trip = create_trip(client, auth)
    resp = client.put(f"/api/trips/{trip['id']}", headers=auth, json={"status": "done"})
    assert resp.status_code == 400


def test_delete(client, auth):
    trip = create_trip(client, auth)
    assert client.delete(f"/api/trips/{trip['id']}", headers=auth).status_code == 200
    assert client.get(f"/api/trips/{trip['id']}", headers=auth).status_code == 404


def test_requires_token(client):
    assert client.get("/api/trips").status_code == 401


# ── Ownership isolation ───────────────────────────────────────────────────────

def test_foreign_trip_looks_missing(client, auth):
    trip = create_trip(client, auth)
    intruder = register(client, email="ravi@example.com", name="Ravi")

    missing = client.get("/api/trips/00000000-0000-0000-0000-000000000000", headers=intruder)
    foreign = client.get(f"/api/trips/{trip['id']}", headers=intruder)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()

    assert client.put(f"/api/trips/{trip['id']}", headers=intruder, json={"destination": "X"}).status_code == 404
    assert client.put(
        f"/api/trips/{trip['id']}/itinerary", headers=intruder, json={"itinerary": []}
    ).status_code == 404
    assert client.delete(f"/api/trips/{trip['id']}", headers=intruder).status_code == 404
    assert client.get("/api/trips", headers=intruder).json() == []

    still_there = client.get(f"/api/trips/{trip['id']}", headers=auth).json()
    assert still_there["destination"] == "Jaipur"


def test_malformed_id_is_not_found(client, auth):
    assert client.get("/api/trips/not-a-uuid", headers=auth).status_code == 404
