"""
Tests for the FastAPI surface

Exercises every route through TestClient with the upstream platform served by
httpx.MockTransport.
"""

from mocks import CREDENTIAL_MISSING_BODY, dify_answer


REPO = "https://github.com/acme/widget"


# =============================================================================
# Health
# =============================================================================


def test_root_reports_judges_and_health(client):
    resp = client.get("/")
    assert resp.status_code == 200

    body = resp.json()
    assert body["status"] == "healthy"
    assert body["checks"]["judges_missing_credentials"] == []
    assert body["checks"]["archive"] == "disabled"
    assert "business" in body["judges"]
    assert "app-test" not in resp.text


# =============================================================================
# POST /api/{judge}
# =============================================================================


def test_submit_returns_envelope(client, upstream):
    upstream.reply(200, dify_answer("Strong market fit", "c1", "m1"))

    resp = client.post("/api/business", json={"repo_url": REPO, "user_id": "u1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data_id"] == "u1"
    assert body["source"] == "business"
    assert body["timestamp"]
    assert body["data"] == {"answer": "Strong market fit", "conversation_id": "c1", "message_id": "m1"}


def test_submit_then_query_roundtrip(client, upstream):
    upstream.reply(200, dify_answer("Strong market fit"))
    client.post("/api/business", json={"repo_url": REPO, "user_id": "u1"})

    resp = client.get("/api/business", params={"data_id": "u1"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": dify_answer("Strong market fit")}


def test_submit_missing_artifacts_is_400(client, upstream):
    resp = client.post("/api/paul", json={"user_id": "u1"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "repo_url or repo_pdf is required"}
    assert upstream.calls == 0


def test_submit_invalid_json_is_400(client, upstream):
    resp = client.post("/api/paul", content=b"{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON payload"
    assert upstream.calls == 0


def test_submit_unknown_judge_is_400(client, upstream):
    resp = client.post("/api/elon", json={"repo_url": REPO})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Unknown judge type: elon"}
    assert upstream.calls == 0


def test_submit_upstream_error_keeps_status(client, upstream):
    upstream.reply(429, "rate limited")

    resp = client.post("/api/sam", json={"repo_url": REPO})

    assert resp.status_code == 429
    assert resp.json() == {
        "success": False,
        "error": "Failed to process Sam Altman analysis",
        "details": "rate limited",
    }


def test_submit_transport_error_is_500(client, upstream):
    upstream.fail()

    resp = client.post("/api/li", json={"repo_url": REPO})

    assert resp.status_code == 500
    assert resp.json()["success"] is False


def test_submit_configuration_error_is_success(client, upstream):
    upstream.reply(400, CREDENTIAL_MISSING_BODY)

    resp = client.post("/api/ng", json={"repo_url": REPO})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert "model provider credentials" in body["data"]["answer"]
    assert "degraded" not in body["data"]


# =============================================================================
# GET /api/{judge}
# =============================================================================


def test_query_without_data_id_is_readiness(client):
    resp = client.get("/api/receive_data")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Technical Analysis API endpoint is ready"
    assert body["endpoint"] == "https://judge.test/api/receive_data"


def test_query_unknown_data_id_is_404(client):
    resp = client.get("/api/business", params={"data_id": "nobody"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Data not found"}


def test_query_is_isolated_per_judge(client, upstream):
    client.post("/api/business", json={"repo_url": REPO, "user_id": "u1"})

    assert client.get("/api/paul", params={"data_id": "u1"}).status_code == 404


# =============================================================================
# PUT /api/{judge}
# =============================================================================


def test_update_merges_fields(client, upstream):
    client.post("/api/business", json={"repo_url": REPO, "user_id": "u1"})
    client.put("/api/business", json={"request_id": "u1", "a": 1, "b": 2})

    resp = client.put("/api/business", json={"request_id": "u1", "b": 3, "c": 4})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Business Analysis request updated successfully"
    assert (body["data"]["a"], body["data"]["b"], body["data"]["c"]) == (1, 3, 4)
    assert body["data"]["answer"] == "Strong market fit"


def test_update_requires_request_id(client):
    resp = client.put("/api/business", json={"a": 1})

    assert resp.status_code == 400
    assert resp.json()["error"] == "request_id is required for updates"


def test_update_unknown_request_is_404(client):
    resp = client.put("/api/business", json={"request_id": "ghost", "a": 1})

    assert resp.status_code == 404


# =============================================================================
# GET /api/{judge}/debug
# =============================================================================


def test_debug_listing_is_redacted(client, upstream):
    upstream.reply(200, dify_answer("confidential verdict"))
    client.post("/api/summary", json={"repo_url": REPO, "user_id": "u1"})
    client.post("/api/summary", json={"repo_url": REPO})

    resp = client.get("/api/summary/debug")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert "confidential verdict" not in resp.text
    assert body["data"][0]["data_id"] == "u1"
    assert body["data"][0]["has_result"] is True


def test_debug_unknown_judge_is_400(client):
    assert client.get("/api/elon/debug").status_code == 400


# =============================================================================
# /api/dify-proxy
# =============================================================================


def test_proxy_forwards_message(client, upstream):
    upstream.reply(200, dify_answer("Ship it"))

    resp = client.post(
        "/api/dify-proxy",
        json={"judgeType": "paul", "message": "Is this default alive?", "inputs": {"repo_url": REPO}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["judgeType"] == "paul"
    assert body["judgeName"] == "Paul Graham"
    assert body["data"]["answer"] == "Ship it"
    assert upstream.last_json() == {
        "inputs": {"repo_url": REPO},
        "query": "Is this default alive?",
        "response_mode": "blocking",
        "user": "a42z_judge_user",
    }


def test_proxy_requires_judge_and_message(client, upstream):
    resp = client.post("/api/dify-proxy", json={"judgeType": "paul"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "judgeType and message are required"
    assert upstream.calls == 0


def test_proxy_unknown_judge_is_400(client, upstream):
    resp = client.post("/api/dify-proxy", json={"judgeType": "elon", "message": "hi"})

    assert resp.status_code == 400
    assert upstream.calls == 0


def test_proxy_upstream_error_passes_status(client, upstream):
    upstream.reply(502, "bad gateway")

    resp = client.post("/api/dify-proxy", json={"judgeType": "sam", "message": "hi"})

    assert resp.status_code == 502
    assert resp.json() == {"success": False, "error": "Dify API Error: 502", "details": "bad gateway"}


def test_proxy_info(client):
    body = client.get("/api/dify-proxy").json()

    assert body["message"] == "Dify API Proxy is running"
    assert "score" in body["available_judges"]


def test_update_accepts_any_value_types(client, upstream):
    client.post("/api/business", json={"repo_url": REPO, "user_id": "u1"})

    resp = client.put("/api/business", json={"request_id": "u1", "answer": 5, "metadata": "x"})
    assert resp.status_code == 200
    assert resp.json()["data"]["answer"] == 5
    assert resp.json()["data"]["metadata"] == "x"

    resp = client.put("/api/business", json={"request_id": "u1", "details": {"note": "x"}})
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    stored = client.get("/api/business", params={"data_id": "u1"}).json()
    assert stored["data"]["answer"] == 5


def test_submit_accepts_numeric_timestamp(client, upstream):
    resp = client.post("/api/business", json={"repo_url": REPO, "user_id": "u1", "timestamp": 1700000000000})

    assert resp.status_code == 200
    assert resp.json()["data_id"] == "u1"


def test_submit_accepts_structured_timestamp(client, upstream):
    resp = client.post("/api/business", json={"repo_url": REPO, "timestamp": {"epoch": 1700000000}})

    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_proxy_accepts_null_inputs(client, upstream):
    resp = client.post("/api/dify-proxy", json={"judgeType": "business", "message": "hi", "inputs": None})

    assert resp.status_code == 200
    assert upstream.last_json()["inputs"] == {}


def test_submit_upstream_body_outside_envelope_is_502(client, upstream):
    upstream.reply(200, {"answer": "x", "error": {"code": "unexpected"}})

    resp = client.post("/api/paul", json={"repo_url": REPO, "user_id": "u1"})

    assert resp.status_code == 502
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "Failed to process Paul Graham analysis"
