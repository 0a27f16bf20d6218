# tests/test_api_generate.py


def test_generate_returns_report_unchanged(client, fake_upstream, sample_report):
    fake_upstream.body = {"id": "resp_1", "output_parsed": sample_report}

    r = client.post(
        "/api/generate",
        json={"address": "111 Cultural Park Blvd S", "purchasePrice": "$500,000", "overrides": "self-managed"},
    )

    assert r.status_code == 200, r.text
    assert r.json() == sample_report
    assert fake_upstream.calls[0]["input"] == "111 Cultural Park Blvd S — $500000 self-managed"


def test_generate_passes_schema_mismatch_through(client, fake_upstream):
    fake_upstream.body = {"output_text": '{"version": "0.9", "note": "partial"}'}

    r = client.post("/api/generate", json={"address": "12 Main St"})

    assert r.status_code == 200
    assert r.json() == {"version": "0.9", "note": "partial"}


def test_generate_empty_object_is_200(client, fake_upstream):
    fake_upstream.body = {"output_text": "{}"}

    r = client.post("/api/generate", json={"address": "12 Main St"})

    assert r.status_code == 200
    assert r.json() == {}

def test_missing_address_is_400(client, fake_upstream):
    r = client.post("/api/generate", json={"purchasePrice": 500000})

    assert r.status_code == 400
    assert r.json() == {"error": "address is required"}
    assert fake_upstream.calls == []


def test_invalid_body_is_treated_as_empty(client, fake_upstream):
    r = client.post("/api/generate", content=b"{not json", headers={"Content-Type": "application/json"})

    assert r.status_code == 400
    assert r.json() == {"error": "address is required"}


def test_upstream_error_status_and_body_pass_through(client, fake_upstream):
    fake_upstream.status = 404
    fake_upstream.body = {"error": {"message": "No prompt found with id 'pmpt_test'."}}

    r = client.post("/api/generate", json={"address": "12 Main St"})

    assert r.status_code == 404
    assert r.json() == {"error": {"message": "No prompt found with id 'pmpt_test'."}}


def test_no_json_returned_is_500_with_raw(client, fake_upstream):
    fake_upstream.body = {"output": [{"type": "message", "content": [{"type": "output_text", "text": "sorry"}]}]}

    r = client.post("/api/generate", json={"address": "12 Main St"})

    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "No JSON returned"
    assert body["raw"] == fake_upstream.body


def test_huge_raw_response_is_not_echoed(client, fake_upstream, settings):
    fake_upstream.body = {"output_text": "x" * (settings.RAW_RESPONSE_MAX_CHARS + 10)}

    r = client.post("/api/generate", json={"address": "12 Main St"})

    assert r.status_code == 500
    raw = r.json()["raw"]
    assert "notice" in raw
    assert raw["chars"] > settings.RAW_RESPONSE_MAX_CHARS


def test_missing_credentials_are_500(client, fake_upstream, settings):
    from propreport.api.http import app, get_settings

    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"OPENAI_API_KEY": None})
    r = client.post("/api/generate", json={"address": "12 Main St"})
    assert r.status_code == 500
    assert r.json() == {"error": "Missing OPENAI_API_KEY"}

    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"OPENAI_PROMPT_ID": None})
    r = client.post("/api/generate", json={"address": "12 Main St"})
    assert r.status_code == 500
    assert r.json() == {"error": "Missing OPENAI_PROMPT_ID"}

    assert fake_upstream.calls == []


def test_wrong_method_is_405(client):
    r = client.get("/api/generate")

    assert r.status_code == 405
    assert r.json() == {"error": "Only POST"}


def test_preflight_is_ok(client):
    assert client.options("/api/generate").status_code == 200

    r = client.options(
        "/api/generate",
        headers={
            "Origin": "https://example.test",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "https://example.test")
