"""
Typed failures raised by the SEO checker boundary and the calculators.
"""

from __future__ import annotations

INVALID_URL = "E001"
NOT_HTML = "E002"
FETCH_FAILED = "E003"
BAD_SIZE = "E004"
PARSE_ERROR = "E005"
CONNECTION_ERROR = "E006"
TIMEOUT = "E007"
SSL_ERROR = "E008"
NOT_FOUND = "E009"
FORBIDDEN = "E010"


class BusinessToolsError(Exception):
    code = "error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class AnalysisError(BusinessToolsError):
    """The page could not be fetched or is not analyzable; the whole run fails."""

    code = FETCH_FAILED


class CalculationError(BusinessToolsError):
    code = "invalid_input"


class RateLimitExceeded(BusinessToolsError):
    code = "rate_limit_exceeded"

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Too many requests. Try again in {retry_after} seconds.")
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, str]:
        payload = super().to_dict()
        payload["retry_after"] = str(self.retry_after)
        return payload
