from __future__ import annotations

from ..extensions import db
from stockbook import entities


class Category(db.Model):
    """
    Product category.

    Products reference categories by NAME, not id, so renaming a category
    rewrites products.category in the same transaction.
    """
    __tablename__ = "categories"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_entity(self) -> entities.Category:
        return entities.Category(id=self.id, name=self.name)

    def apply_entity(self, entity: entities.Category) -> None:
        self.name = entity.name

    @classmethod
    def from_entity(cls, entity: entities.Category) -> "Category":
        row = cls(id=entity.id)
        row.apply_entity(entity)
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()


class Product(db.Model):
    """
    One inventory line.

    TRACKING:
    - imei: one row per serialized unit, quantity fixed at 1, imei globally unique
    - quantity: one row holding a bulk count, imei NULL

    Stock-affecting columns (status, quantity, invoice_id, customer_name) are
    only written by the stock ledger or an explicit operator edit.

    version_id gives optimistic locking: two sales that both read the same
    quantity cannot both commit.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_status_purchase_date", "status", "purchase_date"),
    )

    id = db.Column(db.String(36), primary_key=True)

    product_name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(255), nullable=False, index=True)
    purchase_date = db.Column(db.Date, nullable=False)

    purchase_price = db.Column(db.Numeric(10, 2), nullable=False)
    selling_price = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.String(16), nullable=False, default=entities.STATUS_AVAILABLE, index=True)
    tracking_type = db.Column(db.String(16), nullable=False)

    # NULL for quantity-tracked rows; UNIQUE ignores NULLs
    imei = db.Column(db.String(255), nullable=True, unique=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    notes = db.Column(db.Text, nullable=True)

    invoice_id = db.Column(db.String(36), nullable=True, index=True)
    purchase_order_id = db.Column(db.String(36), db.ForeignKey("purchase_orders.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.product_name!r} status={self.status} qty={self.quantity}>"

    def to_entity(self) -> entities.Product:
        return entities.Product(
            id=self.id,
            product_name=self.product_name,
            category=self.category,
            purchase_date=self.purchase_date,
            purchase_price=entities.money_in(self.purchase_price),
            selling_price=entities.money_in(self.selling_price),
            status=self.status,
            tracking_type=self.tracking_type,
            imei=self.imei,
            quantity=self.quantity,
            notes=self.notes,
            invoice_id=self.invoice_id,
            purchase_order_id=self.purchase_order_id,
            customer_name=self.customer_name,
        )

    def apply_entity(self, entity: entities.Product) -> None:
        self.product_name = entity.product_name
        self.category = entity.category
        self.purchase_date = entity.purchase_date
        self.purchase_price = entity.purchase_price
        self.selling_price = entity.selling_price
        self.status = entity.status
        self.tracking_type = entity.tracking_type
        self.imei = entity.imei
        self.quantity = entity.quantity
        self.notes = entity.notes
        self.invoice_id = entity.invoice_id
        self.purchase_order_id = entity.purchase_order_id
        self.customer_name = entity.customer_name

    @classmethod
    def from_entity(cls, entity: entities.Product) -> "Product":
        row = cls(id=entity.id)
        row.apply_entity(entity)
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()
