"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
from memoria.core.errors import (
    EntityNotFoundError,
    EntityValidationError,
    MemoriaException,
    StorageFailureError,
    UnknownEntityKindError,
)


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_entity_validation_error(self):
        err = EntityValidationError("mood", "rating must be between 1 and 5")
        assert err.http_status == 422
        assert err.code == "ENTITY_VALIDATION_FAILED"
        assert err.message == "Invalid mood entry: rating must be between 1 and 5"
        d = err.to_dict()
        assert d["details"] == {"kind": "mood", "reason": "rating must be between 1 and 5"}

    def test_storage_failure_error_with_cause(self):
        err = StorageFailureError("places", "create", ValueError("disk full"))
        assert err.http_status == 500
        assert err.code == "STORAGE_FAILURE"
        assert "places" in err.message
        assert err.details["operation"] == "create"
        assert err.details["cause"] == "disk full"

    def test_storage_failure_error_without_cause(self):
        err = StorageFailureError("relationships", "repoint")
        assert "cause" not in err.details

    def test_entity_not_found_error(self):
        err = EntityNotFoundError("person", "abc")
        assert err.http_status == 404
        assert err.code == "ENTITY_NOT_FOUND"
        assert err.details == {"kind": "person", "id": "abc"}

    def test_unknown_entity_kind_error(self):
        err = UnknownEntityKindError("vehicle")
        assert err.http_status == 422
        assert err.code == "UNKNOWN_ENTITY_KIND"

    def test_all_are_memoria_exceptions(self):
        for err in (
            EntityValidationError("food", "x"),
            StorageFailureError("food", "list"),
            EntityNotFoundError("food", "1"),
            UnknownEntityKindError("x"),
        ):
            assert isinstance(err, MemoriaException)

    def test_to_dict_without_details(self):
        d = MemoriaException("boom").to_dict()
        assert d == {"code": "INTERNAL_ERROR", "message": "boom"}


# ---------------------------------------------------------------------------
# HTTP envelope
# ---------------------------------------------------------------------------

class TestErrorResponses:
    def test_missing_entity_is_404_envelope(self, client):
        resp = client.get("/moods/does-not-exist")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == "ENTITY_NOT_FOUND"
        assert body["details"]["id"] == "does-not-exist"

    def test_domain_validation_is_422(self, client):
        resp = client.post("/moods", json={"rating": 9, "emotion": "happy"})
        assert resp.status_code == 422
        assert resp.json()["code"] == "ENTITY_VALIDATION_FAILED"

    def test_request_validation_has_field_errors(self, client):
        resp = client.post("/moods", json={"emotion": "happy"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert "rating" in fields

    def test_unknown_kind_is_422(self, client):
        resp = client.get("/vehicles/abc/history")
        assert resp.status_code == 422
        assert resp.json()["code"] == "UNKNOWN_ENTITY_KIND"
