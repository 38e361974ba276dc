import logging
from datetime import datetime, timedelta

from storefront.app.common.fragment_cache import fragments
from storefront.clients.base import CacheMeta, HtmlClient


def test_set_and_get(app):
    with app.app_context():
        assert fragments.set("k1", "<p>a</p>", ["product"])
        assert fragments.get("k1") == "<p>a</p>"
        assert fragments.get("missing") is None


def test_invalidate_by_tag(app):
    with app.app_context():
        fragments.set("k1", "a", ["product", "product-1"])
        fragments.set("k2", "b", ["product", "product-2"])

        assert fragments.invalidate(["product-1"]) == 1
        assert fragments.get("k1") is None
        assert fragments.get("k2") == "b"

        assert fragments.invalidate(["product"]) == 2
        assert fragments.get("k2") is None


def test_expired_fragment_is_not_stored(app):
    with app.app_context():
        assert not fragments.set("old", "x", [], datetime.utcnow() - timedelta(minutes=1))
        assert fragments.get("old") is None


def test_disabled_cache(app):
    app.config["HTML_CACHE_ENABLE"] = False
    with app.app_context():
        assert not fragments.set("k1", "a")
        assert fragments.get("k1") is None


def test_cache_meta_keeps_earliest_expiry():
    meta = CacheMeta()
    soon, later = datetime(2030, 1, 1), datetime(2031, 1, 1)

    meta.add_expire(later)
    meta.add_expire(None)
    meta.add_expire(soon)
    meta.add_tag("product")
    meta.add_tag("product")

    assert meta.expire == soon
    assert meta.tags == ["product"]


# SECTION-001: section content is swapped, markers stay
def test_replace_section():
    content = "<div><!-- s -->old<!-- s --></div>"

    assert HtmlClient.replace_section(content, "new", "s") == "<div><!-- s -->new<!-- s --></div>"


def test_replace_section_without_start_marker():
    assert HtmlClient.replace_section("<div>plain</div>", "new", "s") == "<div>plain</div>"


def test_replace_section_without_end_marker(caplog):
    content = "<div><!-- s -->old</div>"

    with caplog.at_level(logging.ERROR):
        assert HtmlClient.replace_section(content, "new", "s") == content
    assert 'No end marker for section "s" found' in caplog.text


def test_tag_index_drops_vanished_fragments(app):
    with app.app_context():
        fragments.set("k1", "a", ["product"])
        fragments.set("k2", "b", ["product"])
        # gone without invalidate(), e.g. expired
        fragments.backend.delete("k1")

        fragments.set("k3", "c", ["product"])

        assert fragments.backend.get("tag:product") == ["k2", "k3"]
        assert fragments.invalidate(["product"]) == 2
