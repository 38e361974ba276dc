from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import Index, UniqueConstraint, event

from storefront.app.extensions import db
from storefront.app.pricing import Price, ZERO


class PriceColumns:
    """Price fields shared by catalog and order items."""

    price_value = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    price_costs = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    price_rebate = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    tax_name = db.Column(db.String(32), nullable=False, default="VAT")

    def _price(self, tax_flag: bool, currency_id: str, quantity: int = 1) -> Price:
        return Price.for_line(
            self.price_value or ZERO,
            self.price_costs or ZERO,
            self.price_rebate or ZERO,
            self.tax_rate or ZERO,
            tax_flag=tax_flag,
            tax_name=self.tax_name or "",
            currency_id=currency_id,
            quantity=quantity,
        )


def _catalog_price(item: PriceColumns) -> Price:
    cfg = current_app.config
    return item._price(bool(cfg["TAX_FLAG"]), cfg["CURRENCY_ID"])


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)

    products = db.relationship("Product", back_populates="category")


class Product(PriceColumns, db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    label = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(32), nullable=False, default="default")  # default | select | bundle
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    name = db.Column(db.String(255), nullable=False)
    url_name = db.Column(db.String(255), nullable=True)
    short_description = db.Column(db.Text, nullable=True)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(1024), nullable=True)
    stock = db.Column(db.Integer, nullable=False, default=0)

    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    category = db.relationship("Category", back_populates="products")

    attributes = db.relationship(
        "ProductAttribute", back_populates="product", cascade="all, delete-orphan",
        order_by="ProductAttribute.id",
    )
    ref_links = db.relationship(
        "ProductRef", foreign_keys="ProductRef.parent_id", back_populates="parent",
        cascade="all, delete-orphan", order_by="ProductRef.position",
    )

    @property
    def price(self) -> Price:
        return _catalog_price(self)

    def url_segment(self) -> str:
        return self.url_name or self.name.lower().replace(" ", "-")

    def is_available(self, now: datetime | None = None) -> bool:
        now = now or datetime.utcnow()
        if self.status <= 0:
            return False
        if self.start_date is not None and self.start_date > now:
            return False
        if self.end_date is not None and self.end_date < now:
            return False
        return True

    def get_ref_items(self, domain: str = "product") -> dict[int, "Product"]:
        """Referenced items (variants, bundle parts) that are available now, by id."""
        if domain != "product":
            return {}
        now = datetime.utcnow()
        return {link.child.id: link.child for link in self.ref_links if link.child.is_available(now)}


class ProductAttribute(db.Model):
    __tablename__ = "product_attributes"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    product = db.relationship("Product", back_populates="attributes")


class ProductRef(db.Model):
    __tablename__ = "product_refs"

    id = db.Column(db.Integer, primary_key=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    child_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    parent = db.relationship("Product", foreign_keys=[parent_id], back_populates="ref_links")
    child = db.relationship("Product", foreign_keys=[child_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("parent_id", "child_id", name="uq_product_ref_parent_child"),
    )


class Service(PriceColumns, db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(32), nullable=False)  # delivery | payment
    code = db.Column(db.String(64), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    @property
    def price(self) -> Price:
        return _catalog_price(self)


class Order(db.Model):
    __tablename__ = "orders"

    # payment status codes
    PAY_UNFINISHED = -1
    PAY_DELETED = 0
    PAY_CANCELED = 1
    PAY_REFUSED = 2
    PAY_REFUND = 3
    PAY_PENDING = 4
    PAY_AUTHORIZED = 5
    PAY_RECEIVED = 6

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("order_bases.id"), nullable=False, index=True)
    payment_status = db.Column(db.SmallInteger, nullable=False, default=PAY_UNFINISHED)
    delivery_status = db.Column(db.SmallInteger, nullable=False, default=-1)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    base = db.relationship("OrderBase", lazy="joined")


class OrderBase(db.Model):
    """The basket an order was placed with."""

    __tablename__ = "order_bases"

    id = db.Column(db.Integer, primary_key=True)
    currency_id = db.Column(db.String(3), nullable=False, default="EUR")
    tax_flag = db.Column(db.Boolean, nullable=False, default=True)
    customer_reference = db.Column(db.String(255), nullable=False, default="")
    comment = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    addresses = db.relationship("OrderAddress", backref="base", cascade="all, delete-orphan", order_by="OrderAddress.id")
    services = db.relationship("OrderService", backref="base", cascade="all, delete-orphan", order_by="OrderService.id")
    products = db.relationship("OrderProduct", backref="base", cascade="all, delete-orphan", order_by="OrderProduct.position")
    coupons = db.relationship("OrderCoupon", backref="base", cascade="all, delete-orphan", order_by="OrderCoupon.id")

    def get_addresses(self, type_: str) -> list["OrderAddress"]:
        return [a for a in self.addresses if a.type == type_]

    def get_services(self, type_: str) -> list["OrderService"]:
        return [s for s in self.services if s.type == type_]

    def get_coupon_codes(self) -> list[str]:
        codes: list[str] = []
        for c in self.coupons:
            if c.code not in codes:
                codes.append(c.code)
        return codes

    @property
    def price(self) -> Price:
        total = Price(tax_flag=self.tax_flag, currency_id=self.currency_id)
        for p in self.products:
            total.add(p.price)
        for s in self.services:
            total.add(s.price)
        return total


class OrderAddress(db.Model):
    __tablename__ = "order_addresses"

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("order_bases.id"), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)  # payment | delivery

    company = db.Column(db.String(100), nullable=False, default="")
    salutation = db.Column(db.String(8), nullable=False, default="")  # company | mr | mrs | ms
    title = db.Column(db.String(64), nullable=False, default="")
    first_name = db.Column(db.String(64), nullable=False, default="")
    last_name = db.Column(db.String(64), nullable=False, default="")
    address1 = db.Column(db.String(200), nullable=False, default="")
    address2 = db.Column(db.String(200), nullable=False, default="")
    address3 = db.Column(db.String(200), nullable=False, default="")
    postal = db.Column(db.String(16), nullable=False, default="")
    city = db.Column(db.String(200), nullable=False, default="")
    state = db.Column(db.String(200), nullable=False, default="")
    country_id = db.Column(db.String(2), nullable=True)
    language_id = db.Column(db.String(5), nullable=True)
    email = db.Column(db.String(255), nullable=False, default="")
    telephone = db.Column(db.String(32), nullable=False, default="")
    telefax = db.Column(db.String(32), nullable=False, default="")
    website = db.Column(db.String(255), nullable=False, default="")
    vat_id = db.Column(db.String(32), nullable=False, default="")


class OrderService(PriceColumns, db.Model):
    __tablename__ = "order_services"

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("order_bases.id"), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)  # payment | delivery
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    attributes = db.relationship(
        "OrderServiceAttribute", backref="service", cascade="all, delete-orphan",
        order_by="OrderServiceAttribute.id",
    )

    @property
    def price(self) -> Price:
        return self._price(self.base.tax_flag, self.base.currency_id)


class OrderServiceAttribute(db.Model):
    __tablename__ = "order_service_attributes"

    id = db.Column(db.Integer, primary_key=True)
    service_id = db.Column(db.Integer, db.ForeignKey("order_services.id"), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False, default="")
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")
    # scalar or list
    value = db.Column(db.JSON, nullable=True)


class OrderProduct(PriceColumns, db.Model):
    __tablename__ = "order_products"

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("order_bases.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=True)
    product_code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    url_name = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.SmallInteger, nullable=False, default=-1)  # delivery status
    position = db.Column(db.Integer, nullable=False, default=0)

    attributes = db.relationship(
        "OrderProductAttribute", backref="order_product", cascade="all, delete-orphan",
        order_by="OrderProductAttribute.id",
    )

    @property
    def price(self) -> Price:
        return self._price(self.base.tax_flag, self.base.currency_id, self.quantity)

    @property
    def unit_price(self) -> Price:
        return self._price(self.base.tax_flag, self.base.currency_id)

    def get_attributes(self, type_: str) -> list["OrderProductAttribute"]:
        return [a for a in self.attributes if a.type == type_]

    def get_attribute(self, code: str, type_: str) -> "OrderProductAttribute | None":
        for a in self.attributes:
            if a.code == code and a.type == type_:
                return a
        return None


class OrderProductAttribute(db.Model):
    __tablename__ = "order_product_attributes"

    id = db.Column(db.Integer, primary_key=True)
    order_product_id = db.Column(db.Integer, db.ForeignKey("order_products.id"), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False)  # variant | config | custom | hidden
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False, default="")
    value = db.Column(db.JSON, nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)


class OrderCoupon(db.Model):
    __tablename__ = "order_coupons"

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("order_bases.id"), nullable=False, index=True)
    code = db.Column(db.String(64), nullable=False)
    order_product_id = db.Column(db.Integer, db.ForeignKey("order_products.id"), nullable=True)

    __table_args__ = (
        Index("ix_order_coupons_base_code", "base_id", "code"),
    )


@event.listens_for(Product, "after_update")
@event.listens_for(Product, "after_delete")
def _invalidate_product_fragments(mapper, connection, target: Product) -> None:
    from storefront.app.common.fragment_cache import fragments

    fragments.invalidate([f"product-{target.id}"])
