"""
Integration tests for the HTTP surface.
"""


def _mood(**overrides):
    payload = {"rating": 4, "emotion": "calm", "entry_time": "2026-03-01T09:30:00Z"}
    payload.update(overrides)
    return payload


class TestHealth:
    def test_health_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert set(body["stores"]) == {"moods", "places", "people", "food", "memories", "relationships"}


class TestMoodEndpoints:
    def test_create_and_get(self, client):
        resp = client.post("/moods", json=_mood(tags=["sunny"], activities={"exercise": "walk"}))
        assert resp.status_code == 201
        body = resp.json()
        assert body["kind"] == "mood"
        assert body["created"] is True
        assert body["entity"]["tags"] == ["sunny"]

        fetched = client.get(f"/moods/{body['entity_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["activities"] == {"exercise": "walk"}

    def test_create_reports_links(self, client):
        resp = client.post("/moods", json=_mood(location="Home", people=["Anna"], social_context="With Ben"))
        body = resp.json()
        assert body["errors"] == []
        assert {link["target_type"] for link in body["links"]} == {"place", "person"}
        assert len(body["links"]) == 3

    def test_list_is_paginated(self, client):
        for day in range(1, 4):
            client.post("/moods", json=_mood(entry_time=f"2026-03-0{day}T08:00:00Z", notes=str(day)))

        resp = client.get("/moods", params={"limit": 2})
        body = resp.json()
        assert body["total"] == 3
        assert [m["notes"] for m in body["items"]] == ["3", "2"]

        resp = client.get("/moods", params={"limit": 2, "offset": 2, "direction": "desc"})
        assert [m["notes"] for m in resp.json()["items"]] == ["1"]

    def test_limit_is_bounded(self, client):
        assert client.get("/moods", params={"limit": 0}).status_code == 422

    def test_update_replaces(self, client):
        mood_id = client.post("/moods", json=_mood(tags=["a"])).json()["entity_id"]
        resp = client.put(f"/moods/{mood_id}", json=_mood(rating=2, emotion="tired"))
        assert resp.status_code == 200
        body = resp.json()
        assert body["created"] is False
        assert body["entity"]["rating"] == 2
        assert body["entity"]["tags"] == []

    def test_update_missing_is_404(self, client):
        assert client.put("/moods/nope", json=_mood()).status_code == 404

    def test_delete(self, client):
        mood_id = client.post("/moods", json=_mood()).json()["entity_id"]
        assert client.delete(f"/moods/{mood_id}").status_code == 204
        assert client.get(f"/moods/{mood_id}").status_code == 404
        assert client.delete(f"/moods/{mood_id}").status_code == 404


class TestPlaceEndpoints:
    def test_duplicate_name_reuses_place(self, client):
        first = client.post("/places", json={"name": "Cafe"})
        second = client.post("/places", json={"name": " cafe "})
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["entity_id"] == first.json()["entity_id"]
        assert client.get("/places").json()["total"] == 1

    def test_place_moods(self, client):
        mood_id = client.post("/moods", json=_mood(location="Library")).json()["entity_id"]
        place_id = client.get("/places").json()["items"][0]["id"]
        resp = client.get(f"/places/{place_id}/moods")
        assert resp.json() == {"place_id": place_id, "mood_ids": [mood_id]}

    def test_nearby(self, client):
        client.post("/places", json={"name": "Near", "latitude": 52.0, "longitude": 4.0})
        client.post("/places", json={"name": "Far", "latitude": 10.0, "longitude": 10.0})
        resp = client.get("/places/nearby", params={"latitude": 52.001, "longitude": 4.0})
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Near"]

    def test_half_coordinates_rejected(self, client):
        resp = client.post("/places", json={"name": "Half", "latitude": 1.0})
        assert resp.status_code == 422
        assert resp.json()["code"] == "ENTITY_VALIDATION_FAILED"


class TestOtherKinds:
    def test_person_round_trip(self, client):
        resp = client.post("/people", json={"name": "Anna", "hobbies": ["chess"], "birth_date": "1990-05-17"})
        assert resp.status_code == 201
        person = client.get(f"/people/{resp.json()['entity_id']}").json()
        assert person["hobbies"] == ["chess"]
        assert person["birth_date"] == "1990-05-17"

    def test_food_with_embedded_mood(self, client):
        resp = client.post("/food", json={
            "name": "Soup", "date": "2026-03-02T12:00:00Z",
            "mood_rating": 3, "mood_emotion": "ok", "place": "Canteen",
        })
        assert resp.status_code == 201
        assert resp.json()["errors"] == []
        assert client.get("/moods").json()["total"] == 1

    def test_memory_round_trip(self, client):
        resp = client.post("/memories", json={
            "title": "Lake day", "date": "2026-06-01T10:00:00Z", "photos": ["a.jpg"],
        })
        memory_id = resp.json()["entity_id"]
        assert client.get(f"/memories/{memory_id}").json()["photos"] == ["a.jpg"]


class TestHistoryEndpoints:
    def test_history_both_directions(self, client):
        mood_id = client.post("/moods", json=_mood(location="Home")).json()["entity_id"]
        place_id = client.get("/places").json()["items"][0]["id"]

        resp = client.get(f"/moods/{mood_id}/history")
        assert resp.status_code == 200
        assert {i["entity_id"] for i in resp.json()["items"]} == {place_id}

        resp = client.get(f"/places/{place_id}/history", params={"group": True})
        body = resp.json()
        assert body["total"] == 2
        assert list(body["grouped"]) == ["mood"]
        assert body["items"][0]["entity_data"]["emotion"] == "calm"

    def test_history_of_missing_entity_is_404(self, client):
        assert client.get("/places/pl_missing/history").status_code == 404

    def test_details(self, client):
        food_id = client.post("/food", json={
            "name": "Tacos", "date": "2026-03-05T19:00:00Z", "people": ["Anna", "Ben"],
        }).json()["entity_id"]
        resp = client.get(f"/food/{food_id}/details")
        assert resp.status_code == 200
        body = resp.json()
        assert body["kind"] == "food"
        assert body["entity"]["name"] == "Tacos"
        assert len(body["related"]["person"]) == 4
        assert {i["direction"] for i in body["related"]["person"]} == {"outgoing", "incoming"}

    def test_related_of_kind(self, client):
        food_id = client.post("/food", json={
            "name": "Curry", "date": "2026-03-06T19:00:00Z", "mood_rating": 5, "mood_emotion": "happy",
        }).json()["entity_id"]
        resp = client.get(f"/food/{food_id}/related/mood")
        assert [m["emotion"] for m in resp.json()] == ["happy"]


class TestMaintenanceEndpoints:
    def test_merge_places(self, client, services):
        from memoria.repositories.records import PlaceRecord

        for name in ("Cafe", " cafe ", "CAFE"):
            services.repos.places.create(PlaceRecord(name=name))

        resp = client.post("/maintenance/merge-places")
        assert resp.status_code == 200
        assert resp.json()["merged"] == 2
        assert client.post("/maintenance/merge-places").json()["merged"] == 0

        places = client.get("/places", params={"direction": "asc"}).json()["items"]
        assert [p["merged_into"] is None for p in places] == [True, False, False]

    def test_stats(self, client):
        client.post("/moods", json=_mood(location="Home"))
        body = client.get("/maintenance/stats").json()
        assert body["counts"]["moods"] == 1
        assert body["counts"]["places"] == 1
        assert body["counts"]["relationships"] == 2
        assert body["total"] == 4
