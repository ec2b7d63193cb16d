"""
API routers package.
"""

from api.routers.chat import router as chat_router
from api.routers.data import router as data_router

__all__ = ["chat_router", "data_router"]
