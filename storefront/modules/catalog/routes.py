from __future__ import annotations

from flask import Blueprint, render_template
from markupsafe import Markup

from storefront.clients.base import View
from storefront.clients.catalog.detail import CatalogDetail
from storefront.clients.catalog.lists import CatalogLists
from storefront.clients.catalog.stage import CatalogStage

bp = Blueprint("catalog", __name__)


def _page(header: str, body: str):
    return render_template("page.html", header=Markup(header), body=Markup(body))


@bp.get("/catalog/list", endpoint="lists")
def lists():
    client = CatalogLists()
    client.process()
    return _page("", client.get_body())


@bp.get("/catalog/detail", endpoint="detail")
@bp.get("/catalog/detail/<int:d_prodid>", endpoint="detail")
@bp.get("/catalog/detail/<int:d_prodid>/<d_name>", endpoint="detail")
def detail(d_prodid: int | None = None, d_name: str | None = None):
    view = View.from_request()
    stage = CatalogStage(view)
    client = CatalogDetail(view)

    client.process()
    header = client.get_header()
    body = stage.get_body() + client.get_body()
    return _page(header, body)
