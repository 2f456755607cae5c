from fastapi import HTTPException
from datetime import datetime, timezone
from uuid import uuid4
from typing import Dict, Optional


class APIException(HTTPException):
    """
    Base for every error the service raises on purpose.

    Carries a stable error_code for clients and a correlation_id that is
    echoed in the response and in the logs.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "An unexpected API error occurred",
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.message = message
        self.error_code = error_code or f"ERR_{status_code}"
        self.correlation_id = correlation_id or str(uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()

        super().__init__(status_code=status_code, detail=detail or message, headers=headers)

    def __str__(self) -> str:
        return self.message


class AuthenticationException(APIException):
    """No active user behind the request"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            status_code=401,
            message=message,
            error_code="AUTH_ERROR",
            headers={"WWW-Authenticate": "Bearer"}
        )


class DatabaseException(APIException):
    def __init__(self, message: str = "Database error occurred"):
        super().__init__(
            status_code=500,
            message=message,
            error_code="DATABASE_ERROR"
        )
