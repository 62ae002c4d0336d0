"""Request errors raised at the engine's call boundary.

The engine never raises for "no results".  It only rejects requests that are
structurally invalid, tagging them with the platform-wide error codes so the
API layer can map them onto its own responses.
"""

from typing import Any, Dict, Optional


class ErrorCode:
    """Numeric error codes shared with the rest of the platform."""

    DATA_VALIDATION_FAILED = 3001
    API_INVALID_REQUEST = 4000

    NAMES = {
        DATA_VALIDATION_FAILED: "DATA_VALIDATION_FAILED",
        API_INVALID_REQUEST: "API_INVALID_REQUEST",
    }


class SearchRequestError(ValueError):
    """Raised when a search or ingest request is structurally invalid."""

    def __init__(self, code: int, message: str,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context or {}

    @property
    def code_name(self) -> str:
        return ErrorCode.NAMES.get(self.code, str(self.code))

    def to_dict(self) -> Dict:
        return {
            "code": self.code,
            "name": self.code_name,
            "message": self.message,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"<SearchRequestError {self.code_name}: {self.message}>"


def invalid_request(message: str, **context) -> SearchRequestError:
    return SearchRequestError(ErrorCode.API_INVALID_REQUEST, message, context)


def validation_failed(message: str, **context) -> SearchRequestError:
    return SearchRequestError(ErrorCode.DATA_VALIDATION_FAILED, message, context)
