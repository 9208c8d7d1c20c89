from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .cart import Cart
from .cart_validation import CartValidationError
from .clients.catalog_client import CatalogClient
from .exceptions import AccessDeniedError, ApiError, PreconditionFailedError
from .logging_utils import log_action
from .models import Product
from .reconciler import PurchaseReconciler, PurchaseResult
from .scanner import BarcodeDecoder, ScannerController
from .session import ApiSession, TransactionSession
from .ui_errors import (
    CAMERA_MESSAGE,
    DETAIL_FAILED_MESSAGE,
    LOOKUP_FAILED_MESSAGE,
    NO_TRANSACTION_MESSAGE,
    PRODUCT_NOT_FOUND_MESSAGE,
    TOTAL_FAILED_MESSAGE,
    to_user_facing_error,
)

logger = logging.getLogger(__name__)


@dataclass
class Register:
    """State a register screen renders, plus the operations it calls."""

    catalog: CatalogClient
    transaction: TransactionSession
    reconciler: PurchaseReconciler
    scanner: ScannerController | None = None
    cart: Cart = field(default_factory=Cart)
    product_code: str = ""
    found_product: Product | None = None
    product_error: str = ""
    error_message: str | None = None
    status_message: str = "Ready"
    last_result: PurchaseResult | None = None
    is_submitting: bool = False

    @classmethod
    def from_session(
        cls,
        session: ApiSession,
        *,
        decoder: BarcodeDecoder | None = None,
        surface: Any = None,
    ) -> "Register":
        transaction = TransactionSession.from_config(session)
        reconciler = PurchaseReconciler(
            session=transaction,
            client=session.transactions_client(),
            tax_rate=session.config.tax_rate,
        )
        register = cls(catalog=session.catalog_client(), transaction=transaction, reconciler=reconciler)
        if decoder is not None:
            register.attach_scanner(ScannerController(decoder=decoder, surface=surface))
        return register

    def __post_init__(self) -> None:
        if self.scanner is not None:
            self.attach_scanner(self.scanner)

    @property
    def is_scanning(self) -> bool:
        return self.scanner is not None and self.scanner.is_scanning

    def attach_scanner(self, scanner: ScannerController) -> None:
        scanner.on_decode = self._on_scanned
        scanner.on_error = self._on_scanner_error
        self.scanner = scanner

    def start(self) -> dict[str, Any]:
        transaction_id = self.transaction.open()
        outcome = "success" if transaction_id is not None else "error"
        log_action(logger, "register", "open_transaction", transaction_id, outcome)
        if transaction_id is None:
            return {"ok": False, "error": "Failed to create transaction"}
        return {"ok": True, "transaction_id": transaction_id}

    def lookup(self, code: str | None = None) -> dict[str, Any]:
        value = (self.product_code if code is None else code).strip()
        if not value:
            return {"ok": False, "error": "Product code is required"}
        self.product_code = value
        self.found_product = None
        self.product_error = ""
        self.error_message = None
        try:
            product = self.catalog.lookup(value)
        except ApiError as exc:
            presented = to_user_facing_error(exc, fallback=LOOKUP_FAILED_MESSAGE)
            self.error_message = presented.message
            log_action(logger, "register", "lookup", self.transaction.transaction_id, "error", code=value)
            return {
                "ok": False,
                "error": presented.message,
                "details": presented.technical_details,
                "category": presented.category,
            }
        if product is None:
            self.product_error = PRODUCT_NOT_FOUND_MESSAGE
            log_action(logger, "register", "lookup", self.transaction.transaction_id, "not_found", code=value)
            return {"ok": False, "not_found": True, "error": PRODUCT_NOT_FOUND_MESSAGE}
        self.found_product = product
        log_action(logger, "register", "lookup", self.transaction.transaction_id, "success", code=value)
        return self.add(product)

    def add(self, product: Product) -> dict[str, Any]:
        try:
            line = self.cart.add_or_increment(product)
        except CartValidationError as exc:
            presented = to_user_facing_error(exc)
            self.error_message = presented.message
            return {
                "ok": False,
                "error": presented.message,
                "issues": [issue.reason for issue in exc.issues],
                "product": product,
                "cart": self.cart.render(),
            }
        return {"ok": True, "product": product, "quantity": line.quantity, "cart": self.cart.render()}

    def remove(self, code: str) -> dict[str, Any]:
        self.cart.remove(code)
        return {"ok": True, "cart": self.cart.render()}

    def change_quantity(self, code: str, value: int | str | None) -> dict[str, Any]:
        # An empty prompt answer is a cancel, not an error.
        if value is None or (isinstance(value, str) and not value.strip()):
            return {"ok": False, "cancelled": True, "cart": self.cart.render()}
        try:
            self.cart.set_quantity(code, value)
        except CartValidationError as exc:
            presented = to_user_facing_error(exc)
            self.error_message = presented.message
            return {
                "ok": False,
                "error": presented.message,
                "issues": [issue.reason for issue in exc.issues],
                "cart": self.cart.render(),
            }
        return {"ok": True, "cart": self.cart.render()}

    def toggle_scan(self) -> dict[str, Any]:
        if self.scanner is None:
            return {"ok": False, "error": "Scanner is not configured"}
        try:
            self.scanner.toggle()
        except AccessDeniedError:
            return {"ok": False, "error": CAMERA_MESSAGE, "is_scanning": False}
        return {"ok": True, "is_scanning": self.scanner.is_scanning}

    def stop_scan(self) -> dict[str, Any]:
        if self.scanner is not None:
            self.scanner.stop()
        return {"ok": True, "is_scanning": False}

    def purchase(self) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Purchase already in progress"}
        try:
            self.transaction.require_transaction_id()
        except PreconditionFailedError:
            self.error_message = NO_TRANSACTION_MESSAGE
            log_action(logger, "register", "purchase", None, "precondition_failed")
            return {"ok": False, "error": NO_TRANSACTION_MESSAGE, "precondition_failed": True}

        self.is_submitting = True
        try:
            result = self.reconciler.purchase(self.cart)
        finally:
            self.is_submitting = False
            self._reset_after_purchase()

        self.last_result = result
        self.error_message = None
        if result.failed:
            self.error_message = f"{DETAIL_FAILED_MESSAGE} ({len(result.failed)} of {result.attempted})"
        if result.refresh_error is not None:
            self.error_message = TOTAL_FAILED_MESSAGE
        elif result.total_with_tax is not None:
            self.status_message = f"Purchase completed. Total (tax included): {result.total_with_tax}"
        log_action(
            logger,
            "register",
            "purchase",
            result.transaction_id,
            "success" if result.ok else "partial",
            posted=result.posted,
            failed=len(result.failed),
        )
        return {
            "ok": result.ok,
            "transaction_id": result.transaction_id,
            "total_with_tax": result.total_with_tax,
            "server_total": result.server_total,
            "posted": result.posted,
            "failed": [failure.code for failure in result.failed],
            "error": self.error_message,
        }

    def pre_tax_total(self) -> int:
        return self.cart.total()

    def cart_rows(self) -> dict[str, Any]:
        return self.cart.render()

    def close(self) -> None:
        if self.scanner is not None:
            self.scanner.stop()
        self.transaction.close()

    def _reset_after_purchase(self) -> None:
        self.cart.clear()
        self.product_code = ""
        self.found_product = None
        self.product_error = ""

    def _on_scanned(self, code: str) -> None:
        self.product_code = code
        self.lookup(code)

    def _on_scanner_error(self, error: AccessDeniedError) -> None:
        self.error_message = CAMERA_MESSAGE
