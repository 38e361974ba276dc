"""HTML e-mail sent when the payment status of an order changes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from email.message import EmailMessage

from flask import current_app, render_template, url_for
from markupsafe import Markup, escape

from storefront.app.common.i18n import translate
from storefront.app.models import Order, OrderAddress, OrderBase, OrderProduct
from storefront.app.pricing import Price, ZERO

PAYMENT_STATUS_LABELS = {
    -1: "unfinished",
    0: "deleted",
    1: "canceled",
    2: "refused",
    3: "refund",
    4: "pending",
    5: "authorized",
    6: "received",
}

DELIVERY_STATUS_LABELS = {
    -1: "unfinished",
    0: "deleted",
    1: "pending",
    2: "progress",
    3: "dispatched",
    4: "delivered",
    5: "lost",
    6: "refused",
    7: "returned",
}

SALUTATIONS = {"company": "", "mr": "Mr", "mrs": "Mrs", "ms": "Ms"}

# company, salutation, title, first name, last name, address parts 1-3,
# postal code, city, state, country, language, e-mail, phone, telefax,
# website, VAT id
ADDRESS_FORMAT = (
    "{company}\n"
    "{salutation} {title} {first_name} {last_name}\n"
    "{address1} {address2}\n"
    "{address3}\n"
    "{postal} {city}\n"
    "{state}\n"
    "{country}\n"
    "{language}\n"
    "{email}\n"
    "{telephone}\n"
    "{telefax}\n"
    "{website}\n"
    "{vat_id}\n"
)


def code_label(prefix: str, code, defaults: dict) -> str:
    msgid = f"{prefix}:{code}"
    label = translate("mshop/code", msgid)
    return defaults.get(code, label) if label == msgid else label


def payment_status_label(status: int) -> str:
    return code_label("pay", status, PAYMENT_STATUS_LABELS)


def delivery_status_label(status: int) -> str:
    return code_label("stat", status, DELIVERY_STATUS_LABELS)


@dataclass
class PaymentSummary:
    basket: OrderBase
    price: Price
    # rate -> summed price
    tax_rates: dict[Decimal, Price] = field(default_factory=dict)
    # (tax name, rate) -> summed price
    named_taxes: dict[tuple[str, Decimal], Price] = field(default_factory=dict)
    costs_delivery: Decimal = ZERO
    costs_payment: Decimal = ZERO


def summarize(order: Order) -> PaymentSummary:
    base = order.base
    summary = PaymentSummary(basket=base, price=base.price)

    for price in [p.price for p in base.products] + [s.price for s in base.services]:
        summary.tax_rates.setdefault(price.tax_rate, price.empty()).add(price)
        summary.named_taxes.setdefault((price.tax_name, price.tax_rate), price.empty()).add(price)

    summary.costs_delivery = sum((s.price.costs for s in base.get_services("delivery")), ZERO)
    summary.costs_delivery += sum((p.price.costs for p in base.products), ZERO)
    summary.costs_payment = sum((s.price.costs for s in base.get_services("payment")), ZERO)
    return summary


def intro_message(order: Order) -> str:
    thanks = translate("client", "Thank you for your order {order_id} from {date}.")
    status = order.payment_status
    second = ""

    if status == Order.PAY_REFUND:
        first = translate("client", "The payment for your order {order_id} from {date} has been refunded.")
    elif status == Order.PAY_PENDING:
        first = thanks
        second = translate(
            "client",
            "The order is pending until we receive the final payment. If you've chosen to pay in advance, "
            "please transfer the money to our bank account with the order ID {order_id} as reference.",
        )
    elif status == Order.PAY_RECEIVED:
        first = thanks
        second = translate("client", "We have received your payment, and will take care of your order immediately.")
    else:
        first = thanks

    values = {
        "order_id": order.id,
        "date": order.created_at.strftime(translate("client", "%Y-%m-%d")),
        "status": payment_status_label(status),
    }
    return "\n".join(msg.format(**values) for msg in (first, second) if msg)


def format_address(addr: OrderAddress) -> Markup:
    salutation = translate("mshop/code", addr.salutation) if addr.salutation else ""
    if salutation == addr.salutation:
        salutation = SALUTATIONS.get(addr.salutation, salutation)

    fields = {
        name: getattr(addr, name) or ""
        for name in (
            "company", "title", "first_name", "last_name", "address1", "address2", "address3",
            "postal", "city", "state", "email", "telephone", "telefax", "website", "vat_id",
        )
    }
    text = translate("client", ADDRESS_FORMAT).format(
        salutation=salutation,
        country=translate("country", addr.country_id) if addr.country_id else "",
        language=translate("language", addr.language_id) if addr.language_id else "",
        **fields,
    )

    html = str(escape(text)).strip()
    html = "\n".join(line.strip() for line in html.split("\n"))
    html = re.sub(r"\n+", "<br/>", html)
    return Markup(re.sub(r" +", " ", html))


def product_url(product: OrderProduct) -> str | None:
    if product.product_id is None:
        return None
    endpoint = current_app.config.get("CATALOG_DETAIL_URL_ENDPOINT", "catalog.detail")
    name = product.url_name or product.name.lower().replace(" ", "-")
    return url_for(endpoint, d_prodid=product.product_id, d_name=name, _external=True)


def download_url(attribute) -> str | None:
    endpoint = current_app.config.get("ACCOUNT_DOWNLOAD_URL_ENDPOINT")
    if not endpoint:
        return None
    return url_for(endpoint, dl_id=attribute.id, _external=True)


def render_payment_html(
    order: Order,
    intro: str | None = None,
    logo: str | None = None,
    css: str | None = None,
    show_download_attributes: bool = False,
) -> str:
    """Render the complete HTML document of the payment e-mail.

    Needs a request context for building absolute links; outside of requests
    use ``app.test_request_context(base_url=...)``.
    """
    cfg = current_app.config
    return render_template(
        "email/payment/html_body.html",
        order=order,
        basket=order.base,
        summary=summarize(order),
        message=intro_message(order),
        email_intro=intro,
        html_logo=Markup(logo) if logo else None,
        html_css=Markup(css) if css else None,
        show_download_attributes=show_download_attributes,
        download_payment_status=cfg.get("EMAIL_DOWNLOAD_PAYMENT_STATUS", Order.PAY_RECEIVED),
        attribute_types=cfg.get("EMAIL_SUMMARY_ATTRIBUTE_TYPES", ["variant", "config", "custom"]),
        format_address=format_address,
        product_url=product_url,
        download_url=download_url,
        delivery_status_label=delivery_status_label,
    )


def build_payment_message(order: Order, sender: str | None = None, recipient: str | None = None, **render_options) -> EmailMessage:
    if recipient is None:
        addresses = order.base.get_addresses("payment")
        recipient = addresses[0].email if addresses else ""

    msg = EmailMessage()
    msg["Subject"] = translate("client", "Your order {order_id}").format(order_id=order.id)
    msg["From"] = sender or current_app.config["EMAIL_FROM"]
    msg["To"] = recipient
    msg.set_content(
        intro_message(order)
        + "\n\n"
        + translate("client", "If you have any questions, please reply to this e-mail.")
    )
    msg.add_alternative(render_payment_html(order, **render_options), subtype="html")
    return msg
