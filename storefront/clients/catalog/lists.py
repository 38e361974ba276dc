from __future__ import annotations

from flask import session

from storefront.clients.base import CacheMeta, HtmlClient, View, register
from storefront.clients.catalog.navigator import lists_session_key
from storefront.controllers.product import ProductController, product_filter_from_params


@register("catalog/lists")
class CatalogLists(HtmlClient):
    """Product list; remembers its parameters for the detail page navigator."""

    def get_body(self, uid: str = "") -> str:
        view = self.view
        try:
            view = self.add_data(view, CacheMeta())
        except Exception as err:
            self.add_error(view, "list_error_list", err)
            view.list_items, view.list_total, view.list_start = [], 0, 0
        return view.render(view.config("CATALOG_LISTS_TEMPLATE_BODY", "catalog/lists/body.html"))

    def process(self) -> None:
        session[lists_session_key(self.site)] = self.get_client_params(self.view.param(), ("f", "l"))
        super().process()

    def add_data(self, view: View, meta: CacheMeta) -> View:
        filter = product_filter_from_params(view.param())
        products, total = ProductController().search_items(filter, ["text", "price"])
        self.add_meta_items(products.values(), meta)

        view.list_items = list(products.values())
        view.list_total = total
        view.list_start = filter.start
        return super().add_data(view, meta)
