from __future__ import annotations

from ..extensions import db
from stockbook import entities


class Customer(db.Model):
    """
    Buyer referenced by invoices.

    Names are not unique: two walk-in buyers may share a name.
    """
    __tablename__ = "customers"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"

    def to_entity(self) -> entities.Customer:
        return entities.Customer(id=self.id, name=self.name, phone=self.phone)

    def apply_entity(self, entity: entities.Customer) -> None:
        self.name = entity.name
        self.phone = entity.phone

    @classmethod
    def from_entity(cls, entity: entities.Customer) -> "Customer":
        row = cls(id=entity.id)
        row.apply_entity(entity)
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()


class Supplier(db.Model):
    """Vendor referenced by purchase orders. Name is the natural key."""
    __tablename__ = "suppliers"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Supplier id={self.id} name={self.name!r}>"

    def to_entity(self) -> entities.Supplier:
        return entities.Supplier(id=self.id, name=self.name, email=self.email, phone=self.phone)

    def apply_entity(self, entity: entities.Supplier) -> None:
        self.name = entity.name
        self.email = entity.email
        self.phone = entity.phone

    @classmethod
    def from_entity(cls, entity: entities.Supplier) -> "Supplier":
        row = cls(id=entity.id)
        row.apply_entity(entity)
        return row

    def to_dict(self) -> dict:
        return self.to_entity().to_dict()
