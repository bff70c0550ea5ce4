"""Utility modules for quire.

Provides:
- logger: get_logger for namespaced logging
- text: camel_to_dash, camel_to_snake name conversion
"""

from quire.utils.logger import get_logger
from quire.utils.text import camel_to_dash, camel_to_snake

__all__ = [
    "camel_to_dash",
    "camel_to_snake",
    "get_logger",
]
