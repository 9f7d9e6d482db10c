"""
Default currency catalog seeded by `manage.py seed_currencies`.
Order here is the catalog order.
"""

DEFAULT_CATALOG = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "GBP", "name": "British Pound", "symbol": "£"},
    {"code": "JPY", "name": "Japanese Yen", "symbol": "¥"},
    {"code": "GEL", "name": "Georgian Lari", "symbol": "₾"},
    {"code": "THB", "name": "Thai Baht", "symbol": "฿"},
    {"code": "AED", "name": "UAE Dirham", "symbol": "د.إ"},
    {"code": "VND", "name": "Vietnamese Dong", "symbol": "₫"},
    {"code": "RUB", "name": "Russian Ruble", "symbol": "₽"},
]
