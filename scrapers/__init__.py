"""
Business discovery providers
"""

from .discovery import discover
from .errors import ProviderFailure

__all__ = ["discover", "ProviderFailure"]
