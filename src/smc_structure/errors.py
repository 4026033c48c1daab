"""
Structure engine errors.

Hierarchy:
    StructureError (base)
    ├── ConfigError (invalid lookback / strategy / output mode)
    └── DataError (missing or non-numeric bar fields, broken indices)
"""

from typing import Any, Dict, Optional


class StructureError(Exception):
    """
    Base exception for the market structure engine.

    Attributes:
        message: Error message
        code: Short error code (for logs)
        hint: Suggested fix for the caller
        details: Technical details (optional)
    """

    def __init__(
        self,
        message: str,
        code: str = "STRUCTURE_ERROR",
        hint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error to a dict."""
        return {
            "code": self.code,
            "message": self.message,
            "hint": self.hint,
            "details": self.details,
        }


class ConfigError(StructureError):
    """Invalid engine configuration. Raised before any scanning starts."""

    def __init__(self, message: str, param: Optional[str] = None, value: Any = None):
        details = {}
        if param is not None:
            details["param"] = param
            details["value"] = value
        super().__init__(
            message,
            code="CONFIG_ERROR",
            hint="Lookback lengths must be positive integers",
            details=details,
        )
        self.param = param
        self.value = value


class DataError(StructureError):
    """Malformed bar input. `index` identifies the offending bar when known."""

    def __init__(self, message: str, index: Optional[int] = None, field: Optional[str] = None):
        details: Dict[str, Any] = {}
        if index is not None:
            details["index"] = index
        if field is not None:
            details["field"] = field
        super().__init__(message, code="DATA_ERROR", details=details)
        self.index = index
        self.field = field
