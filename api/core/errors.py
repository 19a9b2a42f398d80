"""
Error taxonomy shared by the catalog engine and the association manager.

`CaseRecordsError` subclasses are expected data outcomes and carry the HTTP
status they map to. `ConfigurationError` is a programming error (an unknown
catalog kind, a bad registry entry) and deliberately sits outside that tree.
"""

from __future__ import annotations

from typing import Any


class CaseRecordsError(Exception):
    status_code = 500
    code = "CASE_RECORDS_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(CaseRecordsError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(CaseRecordsError):
    status_code = 409
    code = "CONFLICT"


class BadRequestError(CaseRecordsError):
    status_code = 400
    code = "BAD_REQUEST"


class ConfigurationError(RuntimeError):
    pass
