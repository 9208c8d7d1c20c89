from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from .clients.catalog_client import CatalogClient
from .clients.transactions_client import TransactionsClient
from .config import ClientConfig
from .detail_ids import DetailIdGenerator
from .exceptions import ApiError, PreconditionFailedError
from .http_client import HttpClient
from .models import Transaction, TransactionCreateRequest

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ApiSession:
    config: ClientConfig
    http: HttpClient | None = None

    def __post_init__(self) -> None:
        self.http = self.http or HttpClient(config=self.config)

    def catalog_client(self) -> CatalogClient:
        return CatalogClient(http=self.http)

    def transactions_client(self) -> TransactionsClient:
        return TransactionsClient(http=self.http)

    def close(self) -> None:
        if self.http is not None:
            self.http.close()


@dataclass
class TransactionSession:
    """The single draft transaction a register works against.

    ``open`` creates the backend transaction once; afterwards the id is read
    only. Until creation succeeds ``transaction_id`` stays ``None`` and anything
    that needs it raises :class:`PreconditionFailedError`.
    """

    client: TransactionsClient
    employee_code: str
    store_code: str
    pos_number: str
    clock: Callable[[], datetime] = _utcnow
    transaction_id: int | None = None
    created_at: datetime | None = None
    _detail_ids: DetailIdGenerator | None = field(default=None, repr=False)

    @classmethod
    def from_config(cls, session: ApiSession) -> "TransactionSession":
        return cls(
            client=session.transactions_client(),
            employee_code=session.config.employee_code,
            store_code=session.config.store_code,
            pos_number=session.config.pos_number,
        )

    @property
    def is_open(self) -> bool:
        return self.transaction_id is not None

    def open(self) -> int | None:
        if self.transaction_id is not None:
            return self.transaction_id
        created_at = self.clock()
        request = TransactionCreateRequest(
            created_at=created_at,
            employee_code=self.employee_code,
            store_code=self.store_code,
            pos_number=self.pos_number,
            total_amount=0,
        )
        try:
            transaction = self.client.create_transaction(request)
        except ApiError as exc:
            logger.error("transaction_create_failed", extra={"status_code": exc.status_code, "error_code": exc.code})
            return None
        self.transaction_id = transaction.transaction_id
        self.created_at = transaction.created_at or created_at
        self._detail_ids = DetailIdGenerator(transaction_id=transaction.transaction_id)
        logger.info("transaction_opened", extra={"transaction_id": self.transaction_id})
        return self.transaction_id

    def require_transaction_id(self) -> int:
        if self.transaction_id is None:
            raise PreconditionFailedError("Transaction has not been created yet")
        return self.transaction_id

    def next_detail_id(self) -> int:
        transaction_id = self.require_transaction_id()
        if self._detail_ids is None:
            self._detail_ids = DetailIdGenerator(transaction_id=transaction_id)
        return self._detail_ids.next_id()

    def fetch(self) -> Transaction:
        return self.client.get_transaction(self.require_transaction_id())

    def refresh_total(self) -> int:
        return self.fetch().total_amount

    def close(self) -> None:
        if self.transaction_id is not None:
            logger.info("transaction_session_closed", extra={"transaction_id": self.transaction_id})
        self.transaction_id = None
        self.created_at = None
        self._detail_ids = None
