from __future__ import annotations

from flask import session, url_for

from storefront.clients.base import CacheMeta, HtmlClient, View, register
from storefront.controllers.product import ProductController, product_filter_from_params

SECTION = "catalog.stage.navigator"


def lists_session_key(site: str) -> str:
    return f"catalog/lists/params/last/{site}"


@register("catalog/stage/navigator")
class CatalogStageNavigator(HtmlClient):
    """Links to the previous and next product of the last product list."""

    subparts_key = "CATALOG_STAGE_NAVIGATOR_SUBPARTS"

    def get_body(self, uid: str = "") -> str:
        marker = f"<!-- {SECTION} -->"
        return marker + self._render(uid) + marker

    def modify_body(self, content: str, uid: str) -> str:
        self.set_view(self.add_data(self.view, CacheMeta()))
        return self.replace_section(content, self._render(uid), SECTION)

    def _render(self, uid: str) -> str:
        view = self.view
        view.navigator_body = super().get_body(uid)
        tpl = view.config("CATALOG_STAGE_NAVIGATOR_TEMPLATE_BODY", "catalog/stage/navigator_body.html")
        return view.render(tpl)

    def add_data(self, view: View, meta: CacheMeta) -> View:
        try:
            pos = int(view.param("d_pos"))
        except (TypeError, ValueError):
            pos = None
        pid = view.param("d_prodid")

        if pos is not None and pid not in (None, ""):
            if pos < 1:
                start, size = 0, 2
            else:
                start, size = pos - 1, 3

            params = session.get(lists_session_key(self.site), {})
            filter = product_filter_from_params(params).set_slice(start, size)
            products, _ = ProductController().search_items(filter, ["text"])

            if len(products) > 1:
                ids = [str(key) for key in products]
                items = list(products.values())
                list_pos = ids.index(str(pid)) if str(pid) in ids else None
                endpoint = view.config("CATALOG_DETAIL_URL_ENDPOINT", "catalog.detail")

                if list_pos is not None and list_pos > 0:
                    first = items[0]
                    view.navigation_prev = url_for(
                        endpoint, d_prodid=first.id, d_name=first.url_segment(), d_pos=pos - 1
                    )

                if list_pos is not None and list_pos < len(items) - 1:
                    last = items[-1]
                    view.navigation_next = url_for(
                        endpoint, d_prodid=last.id, d_name=last.url_segment(), d_pos=pos + 1
                    )

        return super().add_data(view, meta)
