from __future__ import annotations

from ..extensions import db
from stockbook import entities
from stockbook.time_utils import to_utc_z


class Invoice(db.Model):
    """
    Customer invoice.

    AUDIT TRAIL: customer_name and every item's name/imei/price are snapshots
    taken at issue time. Later edits to the customer or product never alter
    a posted invoice. Only the customer binding may be changed afterwards.

    invoice_number is allocated from DocumentSequence("INVOICE") and is also
    guarded by a unique constraint.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.Index("ix_invoices_issue_date", "issue_date"),
    )

    id = db.Column(db.String(36), primary_key=True)

    # Human-readable number (e.g., "INV-2026-0042")
    invoice_number = db.Column(db.String(64), nullable=False, unique=True)

    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=False)

    issue_date = db.Column(db.DateTime(timezone=True), nullable=False)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)

    items = db.relationship(
        "InvoiceItem",
        backref="invoice",
        order_by="InvoiceItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Invoice id={self.id} number={self.invoice_number!r} total={self.total_amount}>"

    def to_entity(self) -> entities.Invoice:
        return entities.Invoice(
            id=self.id,
            invoice_number=self.invoice_number,
            customer_id=self.customer_id,
            customer_name=self.customer_name,
            issue_date=self.issue_date,
            items=[item.to_entity() for item in self.items],
            total_amount=entities.money_in(self.total_amount),
        )

    def apply_entity(self, entity: entities.Invoice) -> None:
        # Only the customer binding is mutable once issued.
        self.customer_id = entity.customer_id
        self.customer_name = entity.customer_name

    @classmethod
    def from_entity(cls, entity: entities.Invoice) -> "Invoice":
        row = cls(
            id=entity.id,
            invoice_number=entity.invoice_number,
            customer_id=entity.customer_id,
            customer_name=entity.customer_name,
            issue_date=entity.issue_date,
            total_amount=entity.total_amount,
        )
        row.items = [
            InvoiceItem.from_entity(item, position=i)
            for i, item in enumerate(entity.items)
        ]
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()


class InvoiceItem(db.Model):
    """
    Invoice line.

    product_id has no foreign key: the line keeps its snapshot even if the
    product row changes.
    """
    __tablename__ = "invoice_items"
    __table_args__ = (
        db.UniqueConstraint("invoice_id", "position", name="uq_invoice_items_invoice_position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.String(36),
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.String(36), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    imei = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    selling_price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_entity(self) -> entities.InvoiceItem:
        return entities.InvoiceItem(
            product_id=self.product_id,
            product_name=self.product_name,
            imei=self.imei,
            quantity=self.quantity,
            selling_price=entities.money_in(self.selling_price),
        )

    @classmethod
    def from_entity(cls, entity: entities.InvoiceItem, *, position: int) -> "InvoiceItem":
        return cls(
            position=position,
            product_id=entity.product_id,
            product_name=entity.product_name,
            imei=entity.imei,
            quantity=entity.quantity,
            selling_price=entity.selling_price,
        )


class PurchaseOrder(db.Model):
    """
    Supplier purchase order.

    poNumber is operator-supplied and unique. product_ids is the snapshot of
    every product row the order generated; total_cost is
    sum(purchase_price * quantity) over those rows at creation.
    """
    __tablename__ = "purchase_orders"
    __table_args__ = (
        db.Index("ix_purchase_orders_issue_date", "issue_date"),
    )

    id = db.Column(db.String(36), primary_key=True)
    po_number = db.Column(db.String(255), nullable=False, unique=True)

    supplier_id = db.Column(db.String(36), db.ForeignKey("suppliers.id"), nullable=False, index=True)
    supplier_name = db.Column(db.String(255), nullable=False)

    issue_date = db.Column(db.DateTime(timezone=True), nullable=False)
    # Draft, Ordered, Completed
    status = db.Column(db.String(16), nullable=False, default="Ordered")
    notes = db.Column(db.Text, nullable=True)
    total_cost = db.Column(db.Numeric(10, 2), nullable=False)

    product_ids = db.Column(db.JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<PurchaseOrder id={self.id} po_number={self.po_number!r} status={self.status}>"

    def to_entity(self) -> entities.PurchaseOrder:
        return entities.PurchaseOrder(
            id=self.id,
            po_number=self.po_number,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            issue_date=self.issue_date,
            status=self.status,
            notes=self.notes,
            total_cost=entities.money_in(self.total_cost),
            product_ids=list(self.product_ids or []),
        )

    def apply_entity(self, entity: entities.PurchaseOrder) -> None:
        self.po_number = entity.po_number
        self.supplier_id = entity.supplier_id
        self.supplier_name = entity.supplier_name
        self.issue_date = entity.issue_date
        self.status = entity.status
        self.notes = entity.notes
        self.total_cost = entity.total_cost
        self.product_ids = list(entity.product_ids)

    @classmethod
    def from_entity(cls, entity: entities.PurchaseOrder) -> "PurchaseOrder":
        row = cls(id=entity.id)
        row.apply_entity(entity)
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()


class DocumentSequence(db.Model):
    """
    Atomic named sequences.

    WHY: "count + 1" numbering races under concurrent writers. The row is
    locked for the duration of the allocating transaction.
    """
    __tablename__ = "document_sequences"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(32), nullable=False, unique=True)
    next_value = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "next_value": self.next_value,
            "updated_at": to_utc_z(self.updated_at),
        }
