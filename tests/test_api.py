"""Endpoint tests using FastAPI TestClient (remote API and Redis are faked)."""

import fakeredis
import httpx
import pytest
import redis.asyncio as redis
from fastapi.testclient import TestClient

from tonguescope.core.app import create_app
from tonguescope.services.analysis_client import AnalysisClient
from tonguescope.services.profile_store import ProfileStore

ALICE = {"name": "Alice", "age": "30", "gender": "Female"}


def test_root_and_health(api):
    assert api.get("/").status_code == 200
    assert api.get("/health").json() == {"status": "ok"}


def test_upstream_health(api):
    response = api.get("/health/upstream")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_lookup_missing_profile_is_404(api):
    assert api.get("/profiles/lookup", params=ALICE).status_code == 404


def test_save_profile_then_lookup(api):
    response = api.post("/profiles", json={**ALICE, "history": {}})
    assert response.status_code == 200

    found = api.get("/profiles/lookup", params=ALICE)
    assert found.status_code == 200
    assert found.json()["history"] == {}


def test_save_profile_merges_history(api, analysis_payload):
    api.post("/profiles", json={**ALICE, "history": {"2024-01-01 10:00:00": analysis_payload}})
    api.post("/profiles", json={**ALICE, "history": {}})

    history = api.get("/profiles/lookup", params=ALICE).json()["history"]
    assert list(history) == ["2024-01-01 10:00:00"]
    # wire names survive the round trip
    assert history["2024-01-01 10:00:00"]["Jaggedness"] == "35.5"
    assert history["2024-01-01 10:00:00"]["white_coating"]["severity"] == "Moderate"


def test_submit_analysis_stores_result_and_returns_report(api, upstream_calls):
    response = api.post(
        "/profiles/analyses",
        data=ALICE,
        files={"image": ("tongue.jpg", b"jpeg-bytes", "image/jpeg")},
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["timestamp"]) == 19
    assert body["analysis"]["MantleScore"] == "72"
    assert body["report"]["summary"] == "Mild white coating with some cracks"
    assert [c["name"] for c in body["report"]["conditions"]][0] == "White Coating"
    assert upstream_calls[0].url.path == "/analyze_tongue"

    stored = api.get("/profiles/lookup", params=ALICE).json()
    assert list(stored["history"]) == [body["timestamp"]]


def test_submit_empty_image_is_rejected(api, upstream_calls):
    response = api.post("/profiles/analyses", data=ALICE, files={"image": ("tongue.jpg", b"", "image/jpeg")})
    assert response.status_code == 400
    assert upstream_calls == []


def test_upstream_failure_is_502():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "down"}))
    client = AnalysisClient(base_url="http://analysis.test/", max_retries=1, transport=transport)
    store = ProfileStore(client=_fake_redis(), key_prefix="api:")

    with TestClient(create_app(store=store, analysis_client=client)) as api:
        response = api.post(
            "/profiles/analyses", data=ALICE, files={"image": ("tongue.jpg", b"jpeg-bytes", "image/jpeg")}
        )
        assert response.status_code == 502
        assert api.get("/profiles/lookup", params=ALICE).status_code == 404


def test_record_analysis_and_history_feed(api, analysis_payload):
    api.post(
        "/profiles/analyses/record",
        json={**ALICE, "timestamp": "2024-01-01 10:00:00", "analysis": analysis_payload},
    )
    api.post(
        "/profiles/analyses/record",
        json={"name": "Bob", "age": "41", "gender": "Male", "timestamp": "2024-01-02 09:00:00", "analysis": {}},
    )

    feed = api.get("/history").json()
    assert [item["profile"] for item in feed] == ["Bob", "Alice"]
    assert feed[0]["date"] == "2024-01-02"


def test_record_analysis_without_timestamp_uses_now(api):
    response = api.post("/profiles/analyses/record", json={**ALICE, "analysis": {"redness": "7"}})
    assert response.status_code == 200
    timestamp = response.json()["timestamp"]
    assert timestamp in api.get("/profiles/lookup", params=ALICE).json()["history"]


def test_track_profile(api, analysis_payload):
    for timestamp, nutrition in (("2024-01-01 10:00:00", "50"), ("2024-02-01 10:00:00", "60")):
        api.post(
            "/profiles/analyses/record",
            json={**ALICE, "timestamp": timestamp, "analysis": {**analysis_payload, "NutritionScore": nutrition}},
        )

    body = api.get("/profiles/track", params=ALICE).json()
    assert [entry["timestamp"] for entry in body["entries"]] == ["2024-02-01 10:00:00", "2024-01-01 10:00:00"]
    assert body["chart"]["short_dates"] == ["01/01", "02/01"]
    assert body["chart"]["nutrition_scores"] == [50.0, 60.0]


def test_track_missing_profile_is_404(api):
    assert api.get("/profiles/track", params=ALICE).status_code == 404


def test_list_and_delete_profiles(api):
    api.post("/profiles", json=ALICE)
    api.post("/profiles", json={"name": "Bob", "age": "41", "gender": "Male"})

    assert [p["name"] for p in api.get("/profiles").json()] == ["Bob", "Alice"]
    assert api.delete("/profiles", params=ALICE).status_code == 200
    assert api.delete("/profiles", params=ALICE).status_code == 404
    assert [p["name"] for p in api.get("/profiles").json()] == ["Bob"]


def test_report_endpoint(api):
    response = api.post("/reports", json={"redness": "90", "Jaggedness": "10"})
    assert response.status_code == 200
    redness = [c for c in response.json()["conditions"] if c["name"] == "Redness"][0]
    assert redness["severity"] == "severe"
    assert redness["status"] == "Concern"


class _DownRedis:
    async def zrevrange(self, *args, **kwargs):
        raise redis.ConnectionError("connection refused")


def test_storage_failure_is_503(analysis_client):
    store = ProfileStore(client=_DownRedis(), key_prefix="api:")
    with TestClient(create_app(store=store, analysis_client=analysis_client)) as api:
        response = api.get("/profiles")
    assert response.status_code == 503


def _fake_redis():
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


def _api_with_upstream(handler):
    client = AnalysisClient(base_url="http://analysis.test/", max_retries=1, transport=httpx.MockTransport(handler))
    store = ProfileStore(client=_fake_redis(), key_prefix="api:")
    return TestClient(create_app(store=store, analysis_client=client))


@pytest.mark.parametrize(
    "upstream_response",
    [
        httpx.Response(200, json={"white_coating": {"white_coating_percentage": "N/A"}}),
        httpx.Response(200, json={"papillae_analysis": {"total_papillae": 12.5}}),
        httpx.Response(200, text="<html>gateway</html>"),
    ],
)
def test_unreadable_analysis_payload_is_502(upstream_response):
    with _api_with_upstream(lambda request: upstream_response) as api:
        response = api.post(
            "/profiles/analyses", data=ALICE, files={"image": ("tongue.jpg", b"jpeg-bytes", "image/jpeg")}
        )
        assert response.status_code == 502
        assert api.get("/profiles/lookup", params=ALICE).status_code == 404


def test_unreadable_health_payload_is_503():
    with _api_with_upstream(lambda request: httpx.Response(200, text="<html>gateway</html>")) as api:
        assert api.get("/health/upstream").status_code == 503


def test_empty_timestamp_is_stored_as_given(api):
    response = api.post("/profiles/analyses/record", json={**ALICE, "timestamp": "", "analysis": {}})

    assert response.json()["timestamp"] == ""
    assert list(api.get("/profiles/lookup", params=ALICE).json()["history"]) == [""]


class _ClosingStore(ProfileStore):
    closed = False

    async def close(self) -> None:
        _ClosingStore.closed = True


class _FailingCloseClient(AnalysisClient):
    async def close(self):
        raise RuntimeError("already gone")


def test_store_closed_even_if_analysis_client_close_fails():
    store = _ClosingStore(client=_fake_redis(), key_prefix="api:")
    client = _FailingCloseClient(base_url="http://analysis.test/", max_retries=1)

    with TestClient(create_app(store=store, analysis_client=client)):
        pass

    assert _ClosingStore.closed is True
