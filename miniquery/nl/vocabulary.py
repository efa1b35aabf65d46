"""
Vocabulary used to recognise tables and columns in free-text questions.

Keywords are matched as case-insensitive substrings. Tables are tried in
order and the first table with a matching keyword wins, so more specific
tables (order_items) come before the tables whose keywords they contain
(orders, products).
"""

from typing import Dict, Optional, Tuple


TABLE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('order_items', ('order item', 'line item', 'order detail', 'order line')),
    ('customers', ('customer', 'client', 'buyer', 'purchaser')),
    ('orders', ('order', 'purchase', 'transaction', 'sale')),
    ('products', ('product', 'item', 'merchandise', 'good')),
    ('employees', ('employee', 'staff', 'worker', 'personnel')),
)

COLUMN_KEYWORDS: Dict[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    'customers': (
        ('id', ('customer id', 'customer number', 'client id')),
        ('name', ('customer name', 'client name', 'name')),
        ('email', ('email', 'mail')),
        ('phone', ('phone', 'telephone', 'contact number')),
        ('address', ('address', 'location')),
        ('orders', ('order count', 'number of orders', 'orders')),
        ('total_spent', ('total spent', 'total purchases', 'spending', 'spent')),
    ),
    'orders': (
        ('id', ('order id', 'order number')),
        ('customer_id', ('customer id', 'client id')),
        ('date', ('order date', 'date', 'purchased on')),
        ('status', ('status', 'order status', 'state')),
        ('total', ('total', 'amount', 'price')),
    ),
    'products': (
        ('id', ('product id', 'item id')),
        ('name', ('product name', 'item name', 'name')),
        ('category', ('category', 'type')),
        ('price', ('price', 'cost')),
        ('stock', ('stock', 'inventory', 'quantity', 'available')),
    ),
    'order_items': (
        ('id', ('order item id', 'line item id')),
        ('order_id', ('order id', 'order number')),
        ('product_id', ('product id', 'item id')),
        ('quantity', ('quantity', 'qty', 'units')),
        ('price', ('price', 'cost', 'amount')),
    ),
    'employees': (
        ('id', ('employee id', 'staff id')),
        ('name', ('employee name', 'name')),
        ('position', ('position', 'title', 'role', 'job')),
        ('department', ('department', 'dept', 'team')),
        ('hire_date', ('hire date', 'hired', 'start date', 'joined')),
    ),
}


def detect_table(text: str) -> Optional[str]:
    """Table whose keywords appear in ``text``, or None"""
    lowered = (text or '').lower()
    for table, keywords in TABLE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return table
    return None


def detect_column(table: str, text: str) -> Optional[str]:
    """Column of ``table`` whose keywords appear in ``text``, or None"""
    lowered = (text or '').lower()
    for column, keywords in COLUMN_KEYWORDS.get(table, ()):
        if any(keyword in lowered for keyword in keywords):
            return column
    return None
