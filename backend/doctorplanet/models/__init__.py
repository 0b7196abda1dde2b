from .auth import User, ApiToken
from .catalog import Product
from .sales import POSSale, POSSaleItem
from .sequences import DailySequence
from .orders import Order, OrderItem
from .udhar import Shop, UdharTransaction, UdharPayment
from .discounts import GlobalDiscount

__all__ = [
    'User', 'ApiToken',
    'Product',
    'POSSale', 'POSSaleItem',
    'DailySequence',
    'Order', 'OrderItem',
    'Shop', 'UdharTransaction', 'UdharPayment',
    'GlobalDiscount',
]
