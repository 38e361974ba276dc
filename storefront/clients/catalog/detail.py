from __future__ import annotations

from flask import session, url_for
from flask_wtf.csrf import generate_csrf
from markupsafe import Markup

from storefront.clients.base import CacheMeta, HtmlClient, View, register
from storefront.controllers.product import ProductController
from storefront.controllers.service import ServiceController

CONFKEY = "CATALOG_DETAIL"
PREFIXES = ("d",)
CSRF_SECTION = "catalog.detail.csrf"
SEEN_SESSION_KEY = "catalog/session/seen/list"


def csrf_field() -> Markup:
    """Hidden form field with the CSRF token of the current session."""
    return Markup('<input type="hidden" name="csrf_token" value="%s">') % generate_csrf()


@register("catalog/detail/service")
class CatalogDetailService(HtmlClient):
    """Delivery options and their costs."""

    def get_body(self, uid: str = "") -> str:
        return self.view.render(self.view.config("CATALOG_DETAIL_SERVICE_TEMPLATE_BODY", "catalog/detail/service_body.html"))

    def add_data(self, view: View, meta: CacheMeta) -> View:
        services = ServiceController().search_items("delivery")
        self.add_meta_items(services, meta, domain="service")
        view.service_items = services
        return super().add_data(view, meta)


@register("catalog/detail/seen")
class CatalogDetailSeen(HtmlClient):
    """Remembers the products a shopper has looked at."""

    def get_body(self, uid: str = "") -> str:
        return ""

    def get_header(self, uid: str = "") -> str:
        return ""

    def process(self) -> None:
        pid = self.view.param("d_prodid") or self.view.config("CATALOG_DETAIL_PRODID_DEFAULT", "")
        if pid not in (None, ""):
            seen = [p for p in session.get(SEEN_SESSION_KEY, []) if p != str(pid)]
            seen.insert(0, str(pid))
            session[SEEN_SESSION_KEY] = seen[: self.view.config("CATALOG_SESSION_SEEN_MAXITEMS", 6)]
        super().process()


@register("catalog/detail")
class CatalogDetail(HtmlClient):
    """Product detail page content.

    Body and header are cached per set of ``d_*`` parameters. Cached markup
    gets the CSRF field of the current session swapped in before it's
    returned, so forms keep working for every shopper.
    """

    subparts_key = "CATALOG_DETAIL_SUBPARTS"
    default_subparts = ["service", "seen"]

    def __init__(self, view: View | None = None):
        super().__init__(view)
        self._meta = CacheMeta()
        self._prepared: View | None = None

    def _prepare(self) -> View:
        # add_data() runs once for header and body
        if self._prepared is None:
            self._prepared = self.add_data(self.view, self._meta)
        return self._prepared

    def get_body(self, uid: str = "") -> str:
        html = self.get_cached("body", uid, PREFIXES, CONFKEY)
        if html is not None:
            return self.modify_body(html, uid)

        view = self.view
        tpl = view.config("CATALOG_DETAIL_TEMPLATE_BODY", "catalog/detail/body.html")
        try:
            view = self._prepare()
            view.detail_body = "".join(sub.set_view(view).get_body(uid) for sub in self.get_sub_clients())
            html = view.render(tpl)
            self.set_cached("body", uid, PREFIXES, CONFKEY, html, self._meta)
            return html
        except Exception as err:
            self.add_error(view, "detail_error_list", err)

        return view.render(tpl)

    def get_header(self, uid: str = "") -> str:
        html = self.get_cached("header", uid, PREFIXES, CONFKEY)
        if html is not None:
            return self.modify_header(html, uid)

        try:
            view = self._prepare()
            view.detail_header = "".join(sub.set_view(view).get_header(uid) for sub in self.get_sub_clients())
            html = view.render(view.config("CATALOG_DETAIL_TEMPLATE_HEADER", "catalog/detail/header.html"))
            self.set_cached("header", uid, PREFIXES, CONFKEY, html, self._meta)
            return html
        except Exception as err:
            self.log_exception(err)
        return ""

    def modify_body(self, content: str, uid: str) -> str:
        content = super().modify_body(content, uid)
        return self.replace_section(content, str(csrf_field()), CSRF_SECTION)

    def process(self) -> None:
        view = self.view
        try:
            session[f"catalog/detail/params/last/{self.site}"] = self.get_client_params(view.param())
            super().process()
        except Exception as err:
            self.add_error(view, "detail_error_list", err)

    def add_data(self, view: View, meta: CacheMeta) -> View:
        prodid = view.param("d_prodid")
        if prodid in (None, ""):
            prodid = view.config("CATALOG_DETAIL_PRODID_DEFAULT", "")

        domains = view.config("CATALOG_DETAIL_DOMAINS") or view.config(
            "CATALOG_DOMAINS", ["media", "price", "text", "attribute", "product"]
        )

        product = ProductController().get_item(prodid, domains)
        self.add_meta_items([product], meta)

        products = product.get_ref_items("product")
        self.add_meta_items(products.values(), meta)

        if view.config("CATALOG_DETAIL_STOCK_ENABLE", True):
            view.detail_stock_url = self.get_stock_url(list(products.values()) + [product])

        view.detail_product_items = products
        view.detail_product_item = product
        view.detail_params = self.get_client_params(view.param())
        return super().add_data(view, meta)

    @staticmethod
    def get_stock_url(products) -> str:
        return url_for("catalog_api.stock", s_prodcode=[p.code for p in products])
