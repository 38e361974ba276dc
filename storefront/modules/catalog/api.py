from __future__ import annotations

from flask import Blueprint, request

from storefront.app.models import Product
from storefront.app.common.errors import abort_json

bp = Blueprint("catalog_api", __name__)


@bp.get("/catalog/stock")
def stock():
    """Stock level per product code, e.g. ?s_prodcode=A&s_prodcode=B"""
    codes = [c for c in request.args.getlist("s_prodcode") if c]
    if not codes:
        abort_json(400, "validation_error", "Missing parameter s_prodcode")

    items = Product.query.filter(Product.code.in_(codes)).all()
    return {"stock": {p.code: p.stock for p in items}}, 200
