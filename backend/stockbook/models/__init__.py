from .catalog import Category, Product
from .parties import Customer, Supplier
from .documents import Invoice, InvoiceItem, PurchaseOrder, DocumentSequence

__all__ = [
    'Category', 'Product',
    'Customer', 'Supplier',
    'Invoice', 'InvoiceItem', 'PurchaseOrder', 'DocumentSequence',
]
