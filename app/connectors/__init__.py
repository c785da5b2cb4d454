"""
app/connectors package marker.
"""

from app.connectors.base import BaseContactConnector
from app.connectors.monday_connector import MondayContactConnector

__all__ = [
    "BaseContactConnector",
    "MondayContactConnector",
]
