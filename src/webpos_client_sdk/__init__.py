from .cart import Cart, CartLine
from .cart_validation import CartValidationError, ValidationIssue, parse_quantity
from .config import ClientConfig, ConfigError, load_config
from .detail_ids import DetailIdGenerator
from .exceptions import (
    AccessDeniedError,
    ApiError,
    InvalidResponseError,
    NotFoundError,
    PreconditionFailedError,
    ServerError,
    TransportError,
    ValidationError,
)
from .http_client import HttpClient
from .models import DetailCreateRequest, DetailRecord, Product, Transaction, TransactionCreateRequest
from .reconciler import PurchaseReconciler, PurchaseResult, tax_inclusive_total
from .register import Register
from .scanner import BarcodeDecoder, ScannerController, ScannerControls, ScannerState
from .session import ApiSession, TransactionSession
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "AccessDeniedError",
    "ApiError",
    "ApiSession",
    "BarcodeDecoder",
    "Cart",
    "CartLine",
    "CartValidationError",
    "ClientConfig",
    "ConfigError",
    "DetailCreateRequest",
    "DetailIdGenerator",
    "DetailRecord",
    "HttpClient",
    "InvalidResponseError",
    "NotFoundError",
    "PreconditionFailedError",
    "Product",
    "PurchaseReconciler",
    "PurchaseResult",
    "Register",
    "ScannerController",
    "ScannerControls",
    "ScannerState",
    "ServerError",
    "Transaction",
    "TransactionCreateRequest",
    "TransactionSession",
    "TransportError",
    "UserFacingError",
    "ValidationError",
    "ValidationIssue",
    "load_config",
    "parse_quantity",
    "tax_inclusive_total",
    "to_user_facing_error",
]
