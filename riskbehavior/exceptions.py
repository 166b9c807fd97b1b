"""
Exceptions for RiskBehavior.

Malformed domain data is never an exception: the validator reports it and the
engine degrades it to zeros. These classes cover caller mistakes only, such as
asking the simulator for zero trials or an export format that does not exist.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standard error codes for RiskBehavior."""
    UNKNOWN_ERROR = "E1000"
    CONFIGURATION_ERROR = "E1002"
    SIMULATION_CONFIG_ERROR = "E7001"
    EXPORT_ERROR = "E8001"


class RiskBehaviorError(Exception):
    """
    Base exception for RiskBehavior.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        result: Dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


class SimulationConfigError(RiskBehaviorError):
    """Raised when the Monte Carlo simulator is given an unusable setup."""

    def __init__(self, message: str, iterations: Optional[int] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.SIMULATION_CONFIG_ERROR,
            details={"iterations": iterations} if iterations is not None else None,
        )
        self.iterations = iterations


class ExportError(RiskBehaviorError):
    """Raised when an analysis output cannot be exported."""

    def __init__(self, message: str, export_format: str = ""):
        super().__init__(
            message=message,
            error_code=ErrorCode.EXPORT_ERROR,
            details={"format": export_format} if export_format else None,
        )
        self.export_format = export_format
