"""Error codes and exceptions raised by the engine."""
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Engine error codes."""

    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_TIER_SIZE = "INVALID_TIER_SIZE"
    INVALID_BET = "INVALID_BET"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"


# Whether the caller can retry after changing input or waiting
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_CONFIG: False,
    ErrorCode.INVALID_TIER_SIZE: False,
    ErrorCode.INVALID_BET: False,
    ErrorCode.INSUFFICIENT_FUNDS: True,
    ErrorCode.ROUND_IN_PROGRESS: True,
}


class GameError(Exception):
    """Base engine error carrying an error code."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Error body handed to presentation collaborators."""
        return {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class InvalidConfigError(GameError):
    """Malformed weight table, grid shape or target column."""

    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.INVALID_CONFIG, message)


class InvalidTierSizeError(GameError):
    """Requested payline tier is larger than the catalog."""

    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.INVALID_TIER_SIZE, message)


class InsufficientFundsError(GameError):
    """Balance does not cover the total bet."""

    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.INSUFFICIENT_FUNDS, message)
