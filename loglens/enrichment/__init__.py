"""
Enrichment modules for LogLens
"""

from .ip_classifier import IPClassifier, IPType
from .ptr_resolver import PTRResolver

__all__ = ['IPClassifier', 'IPType', 'PTRResolver']
