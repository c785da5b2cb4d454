"""
app/api/routers package marker.
"""

from app.api.routers.contacts import router as contacts_router

__all__ = [
    "contacts_router",
]
