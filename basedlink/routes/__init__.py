from .generate import router as generate_router
from .payment import router as payment_router
from .grant import router as grant_router

__all__ = ["generate_router", "payment_router", "grant_router"]
