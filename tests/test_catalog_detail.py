import pytest

from storefront.app.extensions import db
from storefront.app.models import Product
from storefront.clients.catalog.detail import SEEN_SESSION_KEY
from storefront.controllers.product import ProductController

from conftest import csrf_token


# DET-001: detail page shows the product, its variants and the basket form
def test_detail_page_renders_product(client, product_ids):
    r = client.get(f"/catalog/detail/{product_ids[0]}/shirt-1")

    assert r.status_code == 200
    assert "<title>Shirt 1 | Shop</title>" in r.text
    assert '<h1 class="name">Shirt 1</h1>' in r.text
    assert "Shirt 1 S" in r.text
    assert "10.00 EUR" in r.text
    assert "Standard shipping" in r.text
    assert "/api/catalog/stock?s_prodcode=" in r.text
    assert csrf_token(r.text)


def test_detail_uses_default_product(app, client, product_ids):
    app.config["CATALOG_DETAIL_PRODID_DEFAULT"] = str(product_ids[1])

    r = client.get("/catalog/detail")

    assert '<h1 class="name">Shirt 2</h1>' in r.text


# DET-002: unknown ids are reported, not raised
def test_unknown_product_shows_error(client):
    r = client.get("/catalog/detail/9999")

    assert r.status_code == 200
    assert "Item with ID &#34;9999&#34; not found" in r.text


def test_error_message_is_translated(app, client):
    app.config["TRANSLATIONS"] = {"mshop": {'Item with ID "9999" not found': "Artikel fehlt"}}

    r = client.get("/catalog/detail/9999")

    assert "Artikel fehlt" in r.text


# DET-003: disabled products are rejected by the frontend controller
def test_disabled_product_shows_error(client, offline_id):
    r = client.get(f"/catalog/detail/{offline_id}")

    assert r.status_code == 200
    assert f"Product with ID &#34;{offline_id}&#34; is not available" in r.text


# DET-004: unexpected failures are masked and logged
def test_unexpected_error_is_masked(client, product_ids, monkeypatch, caplog):
    def broken(self, product_id, domains):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(ProductController, "get_item", broken)

    r = client.get(f"/catalog/detail/{product_ids[0]}")

    assert r.status_code == 200
    assert "A non-recoverable error occurred" in r.text
    assert "database on fire" not in r.text
    assert "database on fire" in caplog.text


# DET-005: seen products are remembered, most recent first
def test_seen_products_in_session(app, client, product_ids):
    app.config["CATALOG_SESSION_SEEN_MAXITEMS"] = 2

    for pid in product_ids[:3]:
        client.get(f"/catalog/detail/{pid}")
    client.get(f"/catalog/detail/{product_ids[1]}")

    with client.session_transaction() as sess:
        assert sess[SEEN_SESSION_KEY] == [str(product_ids[1]), str(product_ids[2])]


def test_detail_params_in_session(client, product_ids):
    client.get(f"/catalog/detail/{product_ids[0]}/shirt-1", query_string={"d_pos": 3, "x": 1})

    with client.session_transaction() as sess:
        assert sess["catalog/detail/params/last/default"] == {
            "d_prodid": product_ids[0],
            "d_name": "shirt-1",
            "d_pos": "3",
        }


# DET-006: cached pages keep a CSRF token of the current session
def test_cached_detail_gets_session_csrf_token(app, product_ids):
    url = f"/catalog/detail/{product_ids[0]}"

    with app.test_client() as first:
        token_first = csrf_token(first.get(url).text)

    # bypasses the ORM events, so the cached markup stays
    with app.app_context():
        db.session.execute(Product.__table__.update().where(Product.__table__.c.id == product_ids[0]).values(name="Renamed"))
        db.session.commit()

    with app.test_client() as second:
        html = second.get(url).text

    assert "Shirt 1" in html
    assert "Renamed" not in html
    assert html.count("<!-- catalog.detail.csrf -->") == 2
    assert csrf_token(html) != token_first


def test_product_update_invalidates_cached_detail(app, client, product_ids):
    url = f"/catalog/detail/{product_ids[0]}"
    assert "Shirt 1" in client.get(url).text

    with app.app_context():
        db.session.get(Product, product_ids[0]).name = "Shirt One"
        db.session.commit()

    assert "Shirt One" in client.get(url).text


def test_disabled_cache_renders_fresh(app, client, product_ids):
    app.config["HTML_CACHE_ENABLE"] = False
    url = f"/catalog/detail/{product_ids[0]}"
    client.get(url)

    with app.app_context():
        db.session.execute(Product.__table__.update().where(Product.__table__.c.id == product_ids[0]).values(name="Renamed"))
        db.session.commit()

    assert "Renamed" in client.get(url).text


@pytest.mark.parametrize("stock_enabled", [True, False])
def test_stock_url_config(app, client, product_ids, stock_enabled):
    app.config["CATALOG_DETAIL_STOCK_ENABLE"] = stock_enabled

    html = client.get(f"/catalog/detail/{product_ids[1]}").text

    assert ("/api/catalog/stock?s_prodcode=P2" in html) is stock_enabled
