from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, abort, current_app, redirect, request, session, url_for

from storefront.app.extensions import db
from storefront.app.models import Product

# Form target of the detail page
bp = Blueprint("basket", __name__)
# JSON view on the same basket, registered below /api
api_bp = Blueprint("basket_api", __name__)

BASKET_SESSION_KEY = "basket"


# product id (str) -> quantity
def get_session_basket() -> dict[str, int]:
    return session.get(BASKET_SESSION_KEY, {})


def set_session_basket(basket: dict[str, int]) -> None:
    session[BASKET_SESSION_KEY] = basket


def _int_field(name: str, default: int | None = None) -> int | None:
    try:
        return int(request.form.get(name, default))
    except (TypeError, ValueError):
        return None


@bp.post("/basket/add", endpoint="add")
def add():
    prodid = _int_field("b_prodid")
    qty = _int_field("b_quantity", 1)
    if prodid is None or qty is None or qty <= 0:
        abort(400, description="Invalid product or quantity")

    product = db.session.get(Product, prodid)
    if product is None or not product.is_available():
        abort(404, description="Product not found")

    variant_id = _int_field("b_variant")
    if variant_id is not None:
        variants = product.get_ref_items("product")
        if variant_id not in variants:
            abort(400, description="Variant not available")
        product = variants[variant_id]

    basket = get_session_basket()
    key = str(product.id)
    basket[key] = basket.get(key, 0) + qty
    set_session_basket(basket)
    current_app.logger.info("Added product %s (x%d) to basket", product.code, qty)

    return redirect(url_for("basket_api.get_basket"))


@api_bp.get("/basket")
def get_basket():
    items = []
    total = Decimal("0.00")
    for pid, qty in get_session_basket().items():
        product = db.session.get(Product, int(pid))
        if product is None:
            continue
        price = product.price
        line_total = price.value * qty
        total += line_total
        items.append(
            {
                "product_id": product.id,
                "code": product.code,
                "name": product.name,
                "quantity": qty,
                "unit_price": str(price.value),
                "line_total": str(line_total),
            }
        )

    return {
        "items": items,
        "total": str(total),
        "currency_id": current_app.config["CURRENCY_ID"],
    }, 200
