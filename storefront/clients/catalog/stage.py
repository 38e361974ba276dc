from __future__ import annotations

from storefront.clients.base import CacheMeta, HtmlClient, View, register
from storefront.clients.catalog.navigator import CatalogStageNavigator  # registers the sub-client

CONFKEY = "CATALOG_STAGE"
PREFIXES = ("f",)


@register("catalog/stage")
class CatalogStage(HtmlClient):
    """Area above the product details, hosting the navigator."""

    subparts_key = "CATALOG_STAGE_SUBPARTS"
    default_subparts = ["navigator"]

    def get_body(self, uid: str = "") -> str:
        html = self.get_cached("body", uid, PREFIXES, CONFKEY)
        if html is not None:
            return self.modify_body(html, uid)

        view = self.view
        meta = CacheMeta()
        try:
            view = self.add_data(view, meta)
            view.stage_body = "".join(sub.set_view(view).get_body(uid) for sub in self.get_sub_clients())
            html = view.render(view.config("CATALOG_STAGE_TEMPLATE_BODY", "catalog/stage/body.html"))
            self.set_cached("body", uid, PREFIXES, CONFKEY, html, meta)
            return html
        except Exception as err:
            self.add_error(view, "stage_error_list", err)

        return view.render(view.config("CATALOG_STAGE_TEMPLATE_BODY", "catalog/stage/body.html"))

    def add_data(self, view: View, meta: CacheMeta) -> View:
        view.stage_params = self.get_client_params(view.param(), ("f",))
        return super().add_data(view, meta)
