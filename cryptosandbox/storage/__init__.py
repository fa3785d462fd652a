"""
Storage modules for the sandbox.

Includes:
- Append-only, hash-chained audit log
- Signed log receipts
"""

from .audit_log import AuditLog, load_receipt

__all__ = [
    'AuditLog',
    'load_receipt',
]
