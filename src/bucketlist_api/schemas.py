from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class BucketItemOut(BaseModel):
    """
    Schema of one normalized item as returned by the API.

    Only columns present in the sheet are returned; unknown columns are passed
    through as extra keys.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "id": 2,
                "category": "Skills",
                "target_age": 50,
                "title": "Learn a new programming language",
                "note": "TypeScript, to go deeper into the web frontend",
                "image_url": "https://example.com/typescript.png",
                "completed": True,
                "completed_at": "2024-01-15T10:00:00.000Z",
            }
        },
    )

    id: Optional[int] = Field(default=None, description="Item identifier, null when not numeric")
    category: Optional[str] = Field(default=None, description="Trimmed category text")
    target_age: Optional[int] = Field(
        default=None, description="Target age rounded down to its decade, never below the current one"
    )
    title: Optional[str] = Field(default=None, description="Trimmed title text")
    note: Optional[str] = Field(default=None, description="Trimmed note text")
    image_url: Optional[str] = Field(
        default=None, description="http(s) or data:image URL, empty string otherwise"
    )
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    completed_at: Optional[str] = Field(
        default=None, description="ISO8601 UTC completion timestamp, null unless completed"
    )


# PUBLIC_INTERFACE
class ErrorBody(BaseModel):
    code: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Human readable error message")
    detail: Optional[List[Any]] = Field(default=None, description="Validation error details, if any")


# PUBLIC_INTERFACE
class ErrorEnvelope(BaseModel):
    """
    Envelope for every error response.

    Response format:
        {"error": {"code": 404, "message": "Sheet 'list' not found."}}
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": {"code": 404, "message": "Sheet 'list' not found."}}}
    )

    error: ErrorBody

    @classmethod
    def build(cls, code: int, message: str, detail: Optional[List[Any]] = None) -> "ErrorEnvelope":
        return cls(error=ErrorBody(code=code, message=message, detail=detail))

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)
