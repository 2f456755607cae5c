"""
Response envelope shared by the review routes
"""
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, Optional, Type
from uuid import UUID

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def to_jsonable(data: Any) -> Any:
    """Convert Pydantic models, UUIDs, enums and dates into JSON-safe values"""
    if isinstance(data, BaseModel):
        return data.model_dump(mode='json')
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, UUID):
        return str(data)
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    return data


class Response(JSONResponse):
    """
    Standardized API response: {success, data, message[, pagination]}.
    Inherits from JSONResponse to be directly returnable from FastAPI routes
    """

    def __init__(
        self,
        success: bool = True,
        data: Any = None,
        message: str = "Success",
        status_code: int = status.HTTP_200_OK,
        pagination: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        content = {
            "success": success,
            "data": to_jsonable(data),
            "message": message,
        }
        if pagination:
            content["pagination"] = pagination

        super().__init__(content=content, status_code=status_code, **kwargs)

    @classmethod
    def paginated(cls, listing: Dict[str, Any], schema: Type[BaseModel], message: str = "Success") -> "Response":
        """Wrap a ReviewQueryService listing, rendering each row with the given schema"""
        return cls(
            success=True,
            data=[schema.model_validate(row) for row in listing["reviews"]],
            message=message,
            pagination=listing["pagination"],
        )
