def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["status"] == "ok"


def test_api_index(client):
    r = client.get("/api")
    assert r.status_code == 200
    assert "endpoints" in r.json


def test_request_id_is_mirrored(client):
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_api_not_found_is_json(client):
    r = client.get("/api/nope", headers={"X-Request-ID": "rid-1"})
    assert r.status_code == 404
    assert r.json["error"]["code"] == "http_error"
    assert r.json["error"]["request_id"] == "rid-1"


def test_page_not_found_is_html(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.mimetype == "text/html"
    assert "404" in r.text


def test_index_redirects_to_list(client):
    r = client.get("/")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/catalog/list")
