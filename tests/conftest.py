import re
from decimal import Decimal

import pytest

from storefront.app.config import TestConfig
from storefront.app.extensions import db
from storefront.app.factory import create_app
from storefront.app.models import Category, Product, ProductAttribute, ProductRef, Service

CSRF_RE = re.compile(r'name="csrf_token" value="([^"]+)"')


def csrf_token(html: str) -> str:
    match = CSRF_RE.search(html)
    assert match, "no csrf field in page"
    return match.group(1)


def _seed() -> None:
    shirts = Category(name="Shirts")
    db.session.add(shirts)

    # five listed products: Shirt 1 .. Shirt 5, codes P1 .. P5
    for i in range(1, 6):
        db.session.add(
            Product(
                code=f"P{i}", label=f"Shirt {i}", name=f"Shirt {i}", short_description=f"Shirt number {i}",
                price_value=Decimal(f"{i}0.00"), tax_rate=Decimal("19.00"), stock=i * 10, category=shirts,
            )
        )

    # variant of P1 and a disabled product, both outside the category
    variant = Product(code="P1-S", label="Shirt 1 S", name="Shirt 1 S", price_value=Decimal("10.00"), stock=3)
    variant.attributes.append(ProductAttribute(type="size", code="s", name="S"))
    db.session.add(variant)
    db.session.add(Product(code="OFF", label="Offline", name="Offline shirt", status=0))

    db.session.add_all([
        Service(type="delivery", code="standard", name="Standard shipping", price_costs=Decimal("4.90"),
                tax_rate=Decimal("19.00"), position=0),
        Service(type="payment", code="invoice", name="Invoice", position=0),
    ])
    db.session.flush()

    parent = Product.query.filter_by(code="P1").one()
    db.session.add(ProductRef(parent_id=parent.id, child_id=variant.id, position=0))
    db.session.commit()


@pytest.fixture()
def app():
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        _seed()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def product_ids(app):
    """Ids of P1 .. P5 in list order."""
    with app.app_context():
        return [p.id for p in Product.query.filter(Product.code.in_([f"P{i}" for i in range(1, 6)])).order_by(Product.id)]


@pytest.fixture()
def category_id(app):
    with app.app_context():
        return Category.query.filter_by(name="Shirts").one().id


@pytest.fixture()
def offline_id(app):
    with app.app_context():
        return Product.query.filter_by(code="OFF").one().id
