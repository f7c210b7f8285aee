"""Shared pytest fixtures for store, service and API tests."""

import json

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

from tonguescope.core.app import create_app
from tonguescope.models.analysis import AnalysisRecord
from tonguescope.services.analysis_client import AnalysisClient
from tonguescope.services.profile_service import ProfileService
from tonguescope.services.profile_store import ProfileStore

ANALYSIS_PAYLOAD = {
    "Jaggedness": "35.5",
    "Cracks": {"morph": "/srv/out/cracks_001.png", "score": "25"},
    "redness": "7.2",
    "Summary": "Mild+white+coating+with+some+cracks",
    "MantleScore": "72",
    "NutritionScore": "64.8",
    "segmented_image_path": "/srv/out/segmented_001.png",
    "white_coating": {
        "white_coating_percentage": 45.0,
        "visualization_path": "/srv/out/coating_001.png",
        "severity": "Moderate",
    },
    "papillae_analysis": {"total_papillae": 112, "avg_size": 14.2, "avg_redness": 0.61},
}


@pytest.fixture
def redis_client():
    """In-process Redis with a private server so tests never share keys."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(redis_client):
    return ProfileStore(client=redis_client, key_prefix="test:")


@pytest.fixture
def service(store):
    return ProfileService(store)


@pytest.fixture
def analysis_payload():
    return json.loads(json.dumps(ANALYSIS_PAYLOAD))


@pytest.fixture
def analysis(analysis_payload):
    return AnalysisRecord.model_validate(analysis_payload)


@pytest.fixture
def upstream_calls():
    return []


@pytest.fixture
def analysis_transport(upstream_calls):
    """Fake remote analysis API."""

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_calls.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/analyze_tongue"):
            return httpx.Response(200, json=ANALYSIS_PAYLOAD)
        if path.endswith("/health"):
            return httpx.Response(200, json={"status": "healthy", "sam_model": "loaded", "roboflow_client": "ok"})
        if "/image/" in path:
            return httpx.Response(200, content=b"\x89PNG-bytes")
        if "/csv/" in path:
            return httpx.Response(200, content=b"a,b\n1,2\n")
        return httpx.Response(404, json={"detail": "not found"})

    return httpx.MockTransport(handler)


@pytest.fixture
def analysis_client(analysis_transport):
    return AnalysisClient(base_url="http://analysis.test/", max_retries=1, transport=analysis_transport)


@pytest.fixture
def api(analysis_client):
    """TestClient over an app wired to fresh fakes; the lifespan runs inside the context."""
    redis_client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    app = create_app(store=ProfileStore(client=redis_client, key_prefix="api:"), analysis_client=analysis_client)
    with TestClient(app) as client:
        yield client
