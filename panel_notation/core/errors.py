"""Shared error codes for API responses and configuration failures.

Normalization itself never raises for unreadable notation; these codes cover
configuration and request problems only.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INPUT_ERROR = "INPUT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DIALECT_INVALID = "DIALECT_INVALID"  # Unreadable or schema-invalid dialect config
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"  # Configuration store could not be read


class DialectError(Exception):
    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        organization_id: Optional[str] = None,
        source: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.organization_id = organization_id
        self.source = source

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
            "organization_id": self.organization_id,
            "source": self.source,
        }


__all__ = ["DialectError", "ErrorCode"]
