"""
Utilities Module
"""

from uci_adapter.utils.log import setup_logger

__all__ = [
    'setup_logger',
]
