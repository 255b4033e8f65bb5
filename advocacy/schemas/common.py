"""
Common schemas used across multiple endpoints.
"""
from typing import Optional
from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str

    class Config:
        json_schema_extra = {"example": {"message": "Operation successful"}}


class ErrorResponse(BaseModel):
    """Error response. `message` carries the underlying cause for internal errors."""
    error: str
    message: Optional[str] = None

    class Config:
        json_schema_extra = {"example": {"error": "Campaign is not active"}}

