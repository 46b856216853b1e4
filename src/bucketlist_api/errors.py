from __future__ import annotations


class ApiError(Exception):
    """Error surfaced to clients as `{"error": {"code": ..., "message": ...}}`."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class SheetNotFoundError(ApiError):
    def __init__(self, sheet_name: str) -> None:
        super().__init__(404, f"Sheet '{sheet_name}' not found.")
        self.sheet_name = sheet_name
