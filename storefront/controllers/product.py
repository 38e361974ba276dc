from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from storefront.app.extensions import db
from storefront.app.models import Product
from storefront.app.common.errors import FrontendError, ShopError

SORTATIONS = {
    "relevance": (Product.id.asc(),),
    "name": (Product.name.asc(), Product.id.asc()),
    "-name": (Product.name.desc(), Product.id.asc()),
    "price": (Product.price_value.asc(), Product.id.asc()),
    "-price": (Product.price_value.desc(), Product.id.asc()),
    "code": (Product.code.asc(),),
}

MAX_SLICE = 100


@dataclass
class ProductFilter:
    text: str = ""
    category_id: int | None = None
    sort: str = "relevance"
    start: int = 0
    size: int = MAX_SLICE

    def set_slice(self, start: int, size: int) -> "ProductFilter":
        self.start = max(0, int(start))
        self.size = max(0, min(int(size), MAX_SLICE))
        return self


def _int_param(value: Any, default: int | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def product_filter_from_params(params: Mapping[str, Any]) -> ProductFilter:
    """Build the product list filter from f_* (search) and l_* (paging) parameters."""
    sort = (params.get("f_sort") or "relevance").strip()
    if sort not in SORTATIONS:
        sort = "relevance"

    size = _int_param(params.get("l_size"), current_app.config["CATALOG_LISTS_SIZE"])
    size = max(1, min(size, MAX_SLICE))
    page = max(1, _int_param(params.get("l_page"), 1))

    return ProductFilter(
        text=(params.get("f_search") or "").strip(),
        category_id=_int_param(params.get("f_catid"), None),
        sort=sort,
        start=(page - 1) * size,
        size=size,
    )


def _domain_options(domains: Iterable[str]) -> list:
    options = [selectinload(Product.category)]
    domains = set(domains)
    if "attribute" in domains:
        options.append(selectinload(Product.attributes))
    if "product" in domains:
        options.append(selectinload(Product.ref_links))
    return options


def _available(q, now: datetime):
    return q.filter(
        Product.status > 0,
        or_(Product.start_date.is_(None), Product.start_date <= now),
        or_(Product.end_date.is_(None), Product.end_date >= now),
    )


class ProductController:
    def search_items(self, filter: ProductFilter, domains: Iterable[str] = ("text",)) -> tuple[dict[int, Product], int]:
        """Products matching `filter` in list order, keyed by id, and the total count."""
        q = _available(Product.query, datetime.utcnow())

        if filter.text:
            like = f"%{filter.text}%"
            q = q.filter(
                or_(
                    Product.name.ilike(like),
                    Product.short_description.ilike(like),
                    Product.code.ilike(like),
                )
            )
        if filter.category_id is not None:
            q = q.filter(Product.category_id == filter.category_id)

        total = q.count()
        items = (
            q.options(*_domain_options(domains))
            .order_by(*SORTATIONS.get(filter.sort, SORTATIONS["relevance"]))
            .offset(filter.start)
            .limit(filter.size)
            .all()
        )
        return {p.id: p for p in items}, total

    def get_item(self, product_id: Any, domains: Iterable[str]) -> Product:
        pid = _int_param(product_id, None)
        item = db.session.get(Product, pid, options=_domain_options(domains)) if pid is not None else None
        if item is None:
            raise ShopError(f'Item with ID "{product_id}" not found')
        if not item.is_available():
            raise FrontendError(f'Product with ID "{product_id}" is not available')
        return item
