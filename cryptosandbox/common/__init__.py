"""
Common utilities, message definitions and exceptions for the sandbox.
"""

from .messages import *
from .utils import now_ms, sha256_hex, constant_time_compare
from .exceptions import *
from .config import Settings, load_settings

__all__ = [
    'now_ms',
    'sha256_hex',
    'constant_time_compare',
    'Settings',
    'load_settings',
]
