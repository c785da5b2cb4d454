"""
app/repositories package marker.
"""

from app.repositories.contact_repository import ContactRepository

__all__ = [
    "ContactRepository",
]
