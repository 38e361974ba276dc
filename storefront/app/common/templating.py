from __future__ import annotations

import re
from decimal import Decimal

from flask import Flask
from markupsafe import Markup, escape

from storefront.app.common.i18n import translate
from storefront.app.pricing import quantize


def format_number(amount, precision: int = 2) -> str:
    return f"{quantize(Decimal(amount or 0), precision):.{precision}f}"


def format_price(amount, currency_id: str, precision: int = 2) -> str:
    return translate("client", "{value} {currency}").format(
        value=format_number(amount, precision),
        currency=translate("currency", currency_id),
    )


def format_rate(rate) -> str:
    return format_number(rate, 2)


def nl2br(text: str) -> Markup:
    return Markup(re.sub(r"\r?\n", "<br>\n", str(escape(text))))


def init_templating(app: Flask) -> None:
    app.jinja_env.globals["translate"] = translate
    app.jinja_env.filters["price"] = format_price
    app.jinja_env.filters["number"] = format_number
    app.jinja_env.filters["rate"] = format_rate
    app.jinja_env.filters["nl2br"] = nl2br
