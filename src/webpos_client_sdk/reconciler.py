from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from .cart import Cart, CartLine
from .clients.transactions_client import TransactionsClient
from .exceptions import ApiError
from .models import DetailCreateRequest
from .session import TransactionSession

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.10")


def tax_inclusive_total(server_total: int | Decimal, tax_rate: Decimal = DEFAULT_TAX_RATE) -> int:
    """Pre-tax total with tax applied, rounded half up to a whole unit.

    450 -> 495, 455 -> 501 (500.5 rounds up).
    """
    gross = Decimal(server_total) * (Decimal("1") + tax_rate)
    return int(gross.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class DetailFailure:
    code: str
    detail_id: int
    message: str
    status_code: int


@dataclass
class PurchaseResult:
    transaction_id: int
    expected_total: int
    posted: int = 0
    failed: list[DetailFailure] = field(default_factory=list)
    server_total: int | None = None
    total_with_tax: int | None = None
    refresh_error: ApiError | None = None

    @property
    def ok(self) -> bool:
        return not self.failed and self.refresh_error is None

    @property
    def attempted(self) -> int:
        return self.posted + len(self.failed)


@dataclass
class PurchaseReconciler:
    """Flushes a cart into the session's transaction.

    The backend records one detail row per unit, so a line of quantity N is
    posted N times, sequentially and in cart order. A failed unit is recorded
    and the loop moves on; nothing already posted is rolled back.
    """

    session: TransactionSession
    client: TransactionsClient
    tax_rate: Decimal = DEFAULT_TAX_RATE

    def purchase(self, cart: Cart) -> PurchaseResult:
        transaction_id = self.session.require_transaction_id()
        result = PurchaseResult(transaction_id=transaction_id, expected_total=cart.total())
        logger.info(
            "purchase_started",
            extra={"transaction_id": transaction_id, "lines": len(cart), "units": cart.unit_count()},
        )
        for line in cart.lines():
            for _ in range(line.quantity):
                self._post_unit(transaction_id, line, result)

        try:
            result.server_total = self.session.refresh_total()
        except ApiError as exc:
            logger.error(
                "purchase_total_refresh_failed",
                extra={"transaction_id": transaction_id, "status_code": exc.status_code},
            )
            result.refresh_error = exc
            return result
        result.total_with_tax = tax_inclusive_total(result.server_total, self.tax_rate)
        logger.info(
            "purchase_completed",
            extra={
                "transaction_id": transaction_id,
                "posted": result.posted,
                "failed": len(result.failed),
                "server_total": result.server_total,
            },
        )
        return result

    def _post_unit(self, transaction_id: int, line: CartLine, result: PurchaseResult) -> None:
        detail_id = self.session.next_detail_id()
        request = DetailCreateRequest(
            detail_id=detail_id,
            product_id=line.product_id,
            product_code=line.code,
            product_name=line.name,
            product_price=line.unit_price,
        )
        try:
            self.client.create_detail(transaction_id, request)
        except ApiError as exc:
            logger.error(
                "purchase_detail_failed",
                extra={"transaction_id": transaction_id, "detail_id": detail_id, "status_code": exc.status_code},
            )
            result.failed.append(
                DetailFailure(
                    code=line.code,
                    detail_id=detail_id,
                    message=exc.message,
                    status_code=exc.status_code,
                )
            )
            return
        result.posted += 1
