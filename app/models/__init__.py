# app/models/__init__.py
from .user import User
from .category import Category, CategoryType
from .transaction import Transaction
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .receipt import Receipt
