# Routers package
from . import images_router
from . import assistant_router

__all__ = [
    "images_router",
    "assistant_router",
]
