from __future__ import annotations

from decimal import Decimal

import click
from flask import Blueprint, current_app

from storefront.app.extensions import db
from storefront.app.common.fragment_cache import fragments
from storefront.app.models import (
    Category,
    Order,
    OrderAddress,
    OrderBase,
    OrderCoupon,
    OrderProduct,
    OrderProductAttribute,
    OrderService,
    OrderServiceAttribute,
    Product,
    ProductAttribute,
    ProductRef,
    Service,
)
from storefront.clients.email.payment import build_payment_message, render_payment_html

cli_bp = Blueprint("cli", __name__)


def create_demo_catalog() -> list[Product]:
    shirts = Category(name="Shirts")
    db.session.add(shirts)

    products = [
        Product(code="DEMO-T1", label="Demo shirt", name="Classic Shirt", short_description="Cotton shirt.",
                price_value=Decimal("25.00"), tax_rate=Decimal("19.00"), stock=40, category=shirts),
        Product(code="DEMO-T2", label="Demo polo", name="Polo Shirt", short_description="Pique polo.",
                price_value=Decimal("29.90"), tax_rate=Decimal("19.00"), stock=12, category=shirts),
        Product(code="DEMO-T3", label="Demo linen", name="Linen Shirt", short_description="Light linen.",
                price_value=Decimal("39.00"), tax_rate=Decimal("19.00"), stock=0, category=shirts),
        Product(code="DEMO-T4", label="Demo flannel", name="Flannel Shirt", short_description="Warm flannel.",
                price_value=Decimal("45.00"), tax_rate=Decimal("19.00"), stock=7, category=shirts),
    ]
    db.session.add_all(products)

    variants = [
        Product(code="DEMO-T1-S", label="Demo shirt S", name="Classic Shirt S", status=1, stock=10,
                price_value=Decimal("25.00"), tax_rate=Decimal("19.00"), category=shirts),
        Product(code="DEMO-T1-M", label="Demo shirt M", name="Classic Shirt M", status=1, stock=30,
                price_value=Decimal("25.00"), tax_rate=Decimal("19.00"), category=shirts),
    ]
    db.session.add_all(variants)
    db.session.flush()

    for pos, variant in enumerate(variants):
        variant.attributes.append(ProductAttribute(type="size", code=variant.code[-1].lower(), name=variant.code[-1]))
        db.session.add(ProductRef(parent_id=products[0].id, child_id=variant.id, position=pos))
    products[0].attributes.append(ProductAttribute(type="color", code="white", name="White"))

    db.session.add_all([
        Service(type="delivery", code="standard", name="Standard shipping", price_costs=Decimal("4.90"),
                tax_rate=Decimal("19.00"), position=0),
        Service(type="delivery", code="express", name="Express shipping", price_costs=Decimal("9.90"),
                tax_rate=Decimal("19.00"), position=1),
        Service(type="payment", code="invoice", name="Invoice", position=0),
    ])
    return products


def create_demo_order(payment_status: int = Order.PAY_PENDING, tax_flag: bool = True) -> Order:
    base = OrderBase(currency_id=current_app.config["CURRENCY_ID"], tax_flag=tax_flag, customer_reference="PO-4711")
    base.addresses.append(
        OrderAddress(
            type="payment", salutation="mr", first_name="Test", last_name="User", address1="Demo street",
            address2="1", postal="10115", city="Berlin", country_id="DE", email="test@example.com",
        )
    )

    delivery = OrderService(type="delivery", code="standard", name="Standard shipping",
                            price_costs=Decimal("4.90"), tax_rate=Decimal("19.00"))
    payment = OrderService(type="payment", code="invoice", name="Invoice")
    payment.attributes.append(OrderServiceAttribute(code="invoice.number", name="Invoice no.", value="INV-1"))
    base.services.extend([delivery, payment])

    shirt = OrderProduct(product_code="DEMO-T1-M", name="Classic Shirt", url_name="classic-shirt", quantity=2,
                         price_value=Decimal("25.00"), tax_rate=Decimal("19.00"), position=0)
    shirt.attributes.append(OrderProductAttribute(type="variant", code="size", name="M", value="m"))
    base.products.append(shirt)
    base.coupons.append(OrderCoupon(code="WELCOME"))

    order = Order(base=base, payment_status=payment_status)
    db.session.add(order)
    return order


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed a small demo catalog and one order.

    Safe to run multiple times; it will no-op if data exists.
    """

    if Product.query.count() == 0:
        products = create_demo_catalog()
        db.session.flush()
    else:
        products = Product.query.order_by(Product.id).all()

    if Order.query.count() == 0:
        order = create_demo_order()
        order.base.products[0].product_id = products[0].id

    db.session.commit()
    print("Seed complete. Browse /catalog/list")


@cli_bp.cli.command("email-payment")
@click.argument("order_id", type=int)
@click.option("--html", "html_only", is_flag=True, help="Print the HTML part only.")
def email_payment(order_id: int, html_only: bool) -> None:
    """Print the payment e-mail of an order."""
    order = db.session.get(Order, order_id)
    if order is None:
        raise click.ClickException(f"Order {order_id} not found")

    with current_app.test_request_context(base_url=current_app.config["SHOP_BASE_URL"]):
        if html_only:
            click.echo(render_payment_html(order))
        else:
            click.echo(build_payment_message(order).as_string())


@cli_bp.cli.command("cache-clear")
def cache_clear() -> None:
    """Drop all cached HTML fragments."""
    fragments.clear()
    print("Fragment cache cleared.")
