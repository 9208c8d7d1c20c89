from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import InvalidResponseError
from ..models import DetailCreateRequest, DetailRecord, Transaction, TransactionCreateRequest
from .base import BaseClient

logger = logging.getLogger(__name__)


@dataclass
class TransactionsClient(BaseClient):
    module: str = "transactions"

    def create_transaction(self, payload: TransactionCreateRequest | Mapping[str, Any]) -> Transaction:
        request = _coerce_model(payload, TransactionCreateRequest)
        data = self._request(
            "POST",
            "/transactions",
            json_body=request.model_dump(mode="json", by_alias=True),
            operation="create_transaction",
        )
        return self._parse(data, Transaction, "create transaction")

    def get_transaction(self, transaction_id: int) -> Transaction:
        data = self._request("GET", f"/transactions/{transaction_id}", operation="get_transaction")
        return self._parse(data, Transaction, "transaction")

    def create_detail(
        self,
        transaction_id: int,
        payload: DetailCreateRequest | Mapping[str, Any],
    ) -> DetailRecord | None:
        """Post one detail row.

        A 2xx status means the row was created. The echoed record is returned
        when the body can be read, otherwise ``None``.
        """
        request = _coerce_model(payload, DetailCreateRequest)
        try:
            data = self._request(
                "POST",
                f"/transactions/{transaction_id}/details",
                json_body=request.model_dump(mode="json", by_alias=True),
                operation="create_detail",
            )
            if data is None:
                return None
            return self._parse(data, DetailRecord, "create detail")
        except InvalidResponseError as exc:
            logger.warning(
                "detail_response_unreadable",
                extra={"transaction_id": transaction_id, "detail_id": request.detail_id, "error_code": exc.code},
            )
            return None


def _coerce_model(value: Any, model_type: type[Any]):
    if isinstance(value, model_type):
        return value
    return model_type.model_validate(value)
