from .users import User, USER_ROLES
from .inventory import Product
from .customers import Customer, CUSTOMER_TYPES
from .sales import Sale, SaleItem, PAYMENT_METHODS, PAYMENT_STATUSES
from .expenses import Expense, EXPENSE_PAYMENT_METHODS
from .reports import Report, REPORT_TYPES

__all__ = [
    'User', 'USER_ROLES',
    'Product',
    'Customer', 'CUSTOMER_TYPES',
    'Sale', 'SaleItem', 'PAYMENT_METHODS', 'PAYMENT_STATUSES',
    'Expense', 'EXPENSE_PAYMENT_METHODS',
    'Report', 'REPORT_TYPES',
]
