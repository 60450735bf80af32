from .catalog import Product, Category
from .sales import Sale, SaleLine, SALE_STATUSES
from .auth import User, SessionToken

__all__ = [
    'Product', 'Category',
    'Sale', 'SaleLine', 'SALE_STATUSES',
    'User', 'SessionToken',
]
