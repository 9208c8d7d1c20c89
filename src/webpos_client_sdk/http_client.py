from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import InvalidResponseError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    status_code: int | None = None


@dataclass
class HttpClient:
    config: ClientConfig
    session: requests.Session | None = None
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        prefixed = f"{self.config.api_prefix}/{path.lstrip('/')}"
        return urljoin(base, prefixed.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | None:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        normalized_method = method.upper()
        url = self._build_url(path)
        started = time.monotonic()
        try:
            response = self.session.request(
                method=normalized_method,
                url=url,
                headers=request_headers,
                json=json_body,
                params=params,
                timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            self._record_operation(module, operation, started, "transport_error", None)
            logger.warning(
                "http_transport_error",
                extra={"method": normalized_method, "url": url, "error": type(exc).__name__},
            )
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc),
                details={"type": type(exc).__name__},
                status_code=0,
                raw_payload=None,
            ) from exc

        if response.ok:
            if not response.content:
                self._record_operation(module, operation, started, "success", response.status_code)
                return None
            try:
                parsed = response.json()
            except ValueError as exc:
                self._record_operation(module, operation, started, "invalid_response", response.status_code)
                logger.warning(
                    "http_invalid_json",
                    extra={"method": normalized_method, "url": url, "status_code": response.status_code},
                )
                raise InvalidResponseError(
                    code="INVALID_RESPONSE",
                    message="Response body is not valid JSON",
                    details={"body": response.text[:200]},
                    status_code=response.status_code,
                    raw_payload=None,
                ) from exc
            self._record_operation(module, operation, started, "success", response.status_code)
            return parsed

        payload: Any = None
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}
        self._record_operation(module, operation, started, "error", response.status_code)
        logger.info(
            "http_error_response",
            extra={"method": normalized_method, "url": url, "status_code": response.status_code},
        )
        raise map_error(response.status_code, payload if isinstance(payload, dict) else {"details": payload})

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    def _record_operation(
        self,
        module: str,
        operation: str,
        started: float,
        result: str,
        status_code: int | None,
    ) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            status_code=status_code,
        )
