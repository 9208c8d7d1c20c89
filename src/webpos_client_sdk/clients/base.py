from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import InvalidResponseError
from ..http_client import HttpClient

M = TypeVar("M", bound=BaseModel)


@dataclass
class BaseClient:
    http: HttpClient
    module: str = "unknown"

    def _request(self, method: str, path: str, **kwargs):
        kwargs.setdefault("module", self.module)
        return self.http.request(method, path, **kwargs)

    def _parse(self, data: Any, model_type: type[M], what: str) -> M:
        if not isinstance(data, dict):
            raise self._invalid(f"Expected {what} response to be a JSON object", {"type": type(data).__name__})
        try:
            return model_type.model_validate(data)
        except PydanticValidationError as exc:
            fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
            raise self._invalid(f"Invalid {what} response", {"fields": fields}) from exc

    def _invalid(self, message: str, details: object) -> InvalidResponseError:
        last = self.http.last_operation
        return InvalidResponseError(
            code="INVALID_RESPONSE",
            message=message,
            details=details,
            status_code=(last.status_code or 0) if last else 0,
        )
