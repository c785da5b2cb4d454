"""
app/normalization package marker.
"""

from app.normalization.contact_normalizer import ContactNormalizer

__all__ = ["ContactNormalizer"]
