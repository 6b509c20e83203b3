"""
API Adapters Package
Contains the base adapter, the balance provider interface and the Tatum
adapter that implements it.
"""

from .base import BaseAdapter, BalanceProvider, ProviderStatus
from .tatum import TatumAdapter

__all__ = [
    'BaseAdapter',
    'BalanceProvider',
    'ProviderStatus',
    'TatumAdapter'
]
