from marketplace.api.errors import register_exception_handlers
from marketplace.api.routes import order_router, product_router, supplier_router, vendor_router

__all__ = [
    "order_router",
    "product_router",
    "register_exception_handlers",
    "supplier_router",
    "vendor_router",
]
