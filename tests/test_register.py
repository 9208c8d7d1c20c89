from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
import responses

from webpos_client_sdk.config import ClientConfig
from webpos_client_sdk.exceptions import ServerError
from webpos_client_sdk.models import Product
from webpos_client_sdk.register import Register
from webpos_client_sdk.scanner import ScannerController
from webpos_client_sdk.session import ApiSession
from webpos_client_sdk.ui_errors import (
    CAMERA_MESSAGE,
    LOOKUP_FAILED_MESSAGE,
    NO_TRANSACTION_MESSAGE,
    PRODUCT_NOT_FOUND_MESSAGE,
    QUANTITY_MESSAGE,
)

API = "https://api.example.com/api"
TEA = {"PRD_ID": 1, "CODE": "4901", "NAME": "Green tea", "PRICE": 150}
RICE = {"PRD_ID": 2, "CODE": "4902", "NAME": "Rice ball", "PRICE": 120}


@dataclass
class FakeControls:
    stops: int = 0

    def stop(self) -> None:
        self.stops += 1


@dataclass
class FakeDecoder:
    fail: bool = False
    controls: FakeControls = field(default_factory=FakeControls)
    callbacks: list[Callable[..., None]] = field(default_factory=list)

    def decode_from_video_device(self, device_id: Any, surface: Any, callback: Callable[..., None]) -> FakeControls:
        if self.fail:
            raise PermissionError("NotAllowedError")
        self.callbacks.append(callback)
        return self.controls

    def emit(self, code: str | None) -> None:
        self.callbacks[-1](code, None, self.controls)


@pytest.fixture
def api(config: ClientConfig) -> ApiSession:
    return ApiSession(config)


def _products() -> None:
    responses.add(responses.GET, f"{API}/products-by-code/4901", json=TEA, status=200)
    responses.add(responses.GET, f"{API}/products-by-code/4902", json=RICE, status=200)
    responses.add(responses.GET, f"{API}/products-by-code/0000", json={"detail": "Product not found"}, status=404)


def _opened(api: ApiSession, decoder: FakeDecoder | None = None) -> Register:
    responses.add(responses.POST, f"{API}/transactions", json={"TRD_ID": 77, "TOTAL_AMT": 0}, status=201)
    register = Register.from_session(api, decoder=decoder, surface="video-preview")
    assert register.start() == {"ok": True, "transaction_id": 77}
    return register


@responses.activate
def test_lookup_adds_and_increments(api: ApiSession) -> None:
    _products()
    register = _opened(api)

    first = register.lookup("4901")
    register.lookup("4902")
    register.lookup(" 4901 ")

    assert first["ok"] is True
    assert register.found_product is not None
    assert register.found_product.code == "4901"
    assert register.product_code == "4901"
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4901", 2), ("4902", 1)]
    assert register.pre_tax_total() == 420


@responses.activate
def test_lookup_not_found_keeps_cart_and_clears_display(api: ApiSession) -> None:
    _products()
    register = _opened(api)
    register.lookup("4901")

    outcome = register.lookup("0000")

    assert outcome == {"ok": False, "not_found": True, "error": PRODUCT_NOT_FOUND_MESSAGE}
    assert register.found_product is None
    assert register.product_error == PRODUCT_NOT_FOUND_MESSAGE
    assert register.error_message is None
    assert [row["code"] for row in register.cart_rows()["rows"]] == ["4901"]


@responses.activate
def test_lookup_transport_failure_is_distinct_from_not_found(api: ApiSession) -> None:
    responses.add(responses.GET, f"{API}/products-by-code/5000", json={"detail": "boom"}, status=500)
    register = _opened(api)

    outcome = register.lookup("5000")

    assert outcome["ok"] is False
    assert outcome["category"] == "transport"
    assert outcome["error"] == LOOKUP_FAILED_MESSAGE
    assert register.product_error == ""
    assert len(register.cart) == 0


def test_empty_code_is_ignored(api: ApiSession) -> None:
    register = Register.from_session(api)

    with responses.RequestsMock() as mocked:
        assert register.lookup("   ")["ok"] is False
        assert len(mocked.calls) == 0


@responses.activate
def test_change_quantity_and_remove(api: ApiSession) -> None:
    _products()
    register = _opened(api)
    register.lookup("4901")
    register.lookup("4902")

    assert register.change_quantity("4901", "5")["ok"] is True
    rejected = register.change_quantity("4902", "100")
    cancelled = register.change_quantity("4902", "")
    register.remove("4901")

    assert rejected["ok"] is False
    assert cancelled["cancelled"] is True
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4902", 1)]


def test_purchase_without_transaction_is_precondition_failure(api: ApiSession) -> None:
    register = Register.from_session(api)
    register.add(Product(id=1, code="4901", name="Green tea", unit_price=150))

    with responses.RequestsMock() as mocked:
        outcome = register.purchase()
        assert len(mocked.calls) == 0

    assert outcome["precondition_failed"] is True
    assert outcome["error"] == NO_TRANSACTION_MESSAGE
    assert len(register.cart) == 1


@responses.activate
def test_start_failure_disables_purchase(api: ApiSession) -> None:
    responses.add(responses.POST, f"{API}/transactions", json={"detail": "down"}, status=500)
    register = Register.from_session(api)

    assert register.start()["ok"] is False
    assert register.purchase()["precondition_failed"] is True


@responses.activate
def test_purchase_posts_units_and_clears_state(api: ApiSession) -> None:
    _products()
    responses.add(responses.POST, f"{API}/transactions/77/details", json={}, status=201)
    responses.add(responses.GET, f"{API}/transactions/77", json={"TRD_ID": 77, "TOTAL_AMT": 300}, status=200)
    register = _opened(api)
    register.lookup("4901")
    register.lookup("4901")

    outcome = register.purchase()

    detail_calls = [call for call in responses.calls if call.request.url.endswith("/details")]
    assert len(detail_calls) == 2
    assert outcome["ok"] is True
    assert outcome["total_with_tax"] == 330
    assert "330" in register.status_message
    assert len(register.cart) == 0
    assert register.product_code == ""
    assert register.found_product is None
    assert register.product_error == ""


@responses.activate
def test_purchase_clears_cart_even_when_units_fail(api: ApiSession) -> None:
    _products()
    responses.add(responses.POST, f"{API}/transactions/77/details", json={"detail": "x"}, status=500)
    responses.add(responses.POST, f"{API}/transactions/77/details", json={}, status=201)
    responses.add(responses.GET, f"{API}/transactions/77", json={"TRD_ID": 77, "TOTAL_AMT": 150}, status=200)
    register = _opened(api)
    register.lookup("4901")
    register.change_quantity("4901", 2)

    outcome = register.purchase()

    assert outcome["ok"] is False
    assert outcome["failed"] == ["4901"]
    assert outcome["posted"] == 1
    assert outcome["total_with_tax"] == 165
    assert register.error_message is not None
    assert len(register.cart) == 0
    assert register.found_product is None


@responses.activate
def test_scan_feeds_lookup_once(api: ApiSession) -> None:
    _products()
    decoder = FakeDecoder()
    register = _opened(api, decoder)

    assert register.toggle_scan() == {"ok": True, "is_scanning": True}
    decoder.emit(None)
    decoder.emit("4902")
    decoder.emit("4902")

    lookups = [call for call in responses.calls if "/products-by-code/" in call.request.url]
    assert len(lookups) == 1
    assert decoder.controls.stops == 1
    assert not register.is_scanning
    assert register.product_code == "4902"
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4902", 1)]


@responses.activate
def test_scan_toggle_off_and_camera_denied(api: ApiSession) -> None:
    register = _opened(api, FakeDecoder())
    register.toggle_scan()
    assert register.toggle_scan() == {"ok": True, "is_scanning": False}

    denied = ScannerController(decoder=FakeDecoder(fail=True))
    register.attach_scanner(denied)
    outcome = register.toggle_scan()

    assert outcome["ok"] is False
    assert outcome["error"] == CAMERA_MESSAGE
    assert register.error_message == CAMERA_MESSAGE
    assert not register.is_scanning


@dataclass
class InterleavingCatalog:
    """Catalog whose lookup lets another register action run before it answers."""

    product: Product
    during_lookup: Callable[[], None] | None = None
    calls: int = 0

    def lookup(self, code: str) -> Product | None:
        self.calls += 1
        if self.during_lookup is not None:
            action, self.during_lookup = self.during_lookup, None
            action()
        return self.product


@responses.activate
def test_purchase_while_lookup_in_flight(api: ApiSession) -> None:
    responses.add(responses.POST, f"{API}/transactions/77/details", json={}, status=201)
    responses.add(responses.GET, f"{API}/transactions/77", json={"TRD_ID": 77, "TOTAL_AMT": 150}, status=200)
    register = _opened(api)
    tea = Product.model_validate(TEA)
    rice = Product.model_validate(RICE)
    register.add(tea)
    purchases: list[dict[str, Any]] = []
    register.catalog = InterleavingCatalog(product=rice, during_lookup=lambda: purchases.append(register.purchase()))  # type: ignore[assignment]

    register.lookup("4902")

    detail_calls = [call for call in responses.calls if call.request.url.endswith("/details")]
    assert len(detail_calls) == 1
    assert purchases[0]["total_with_tax"] == 165
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4902", 1)]
    assert register.found_product == rice


def test_lookup_server_error_type_is_preserved_in_details(api: ApiSession) -> None:
    @dataclass
    class FailingCatalog:
        def lookup(self, code: str) -> Product | None:
            raise ServerError(code="DB", message="down", details=None, status_code=503)

    register = Register.from_session(api)
    register.catalog = FailingCatalog()  # type: ignore[assignment]

    outcome = register.lookup("4901")

    assert outcome["details"] == "DB (HTTP 503)"


@responses.activate
def test_lookup_with_incomplete_product_is_a_lookup_failure(api: ApiSession) -> None:
    _products()
    responses.add(responses.GET, f"{API}/products-by-code/4903", json={"PRD_ID": 3, "CODE": "4903"}, status=200)
    register = _opened(api)
    register.lookup("4901")

    outcome = register.lookup("4903")

    assert outcome["ok"] is False
    assert outcome["error"] == LOOKUP_FAILED_MESSAGE
    assert outcome["category"] == "transport"
    assert register.error_message == LOOKUP_FAILED_MESSAGE
    assert register.found_product is None
    assert register.product_error == ""
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4901", 1)]


def test_add_at_quantity_cap_reports_quantity_message(api: ApiSession) -> None:
    register = Register.from_session(api)
    tea = Product.model_validate(TEA)
    register.add(tea)
    register.change_quantity("4901", 99)

    outcome = register.add(tea)

    assert outcome["ok"] is False
    assert outcome["error"] == QUANTITY_MESSAGE
    assert outcome["issues"]
    assert register.error_message == QUANTITY_MESSAGE
    assert register.cart_rows()["rows"][0]["quantity"] == 99


@dataclass
class ScriptedCatalog:
    """Catalog that answers per code and can run one nested lookup before answering."""

    products: dict[str, Product]
    during_lookup: Callable[[], None] | None = None
    codes: list[str] = field(default_factory=list)

    def lookup(self, code: str) -> Product | None:
        self.codes.append(code)
        if self.during_lookup is not None:
            action, self.during_lookup = self.during_lookup, None
            action()
        return self.products.get(code)


def test_overlapping_lookups_last_response_wins(api: ApiSession) -> None:
    register = Register.from_session(api)
    tea = Product.model_validate(TEA)
    rice = Product.model_validate(RICE)
    catalog = ScriptedCatalog(products={"4901": tea, "4902": rice})
    catalog.during_lookup = lambda: register.lookup("4902")
    register.catalog = catalog  # type: ignore[assignment]

    outcome = register.lookup("4901")

    assert catalog.codes == ["4901", "4902"]
    assert outcome["ok"] is True
    assert register.found_product == tea
    assert [(row["code"], row["quantity"]) for row in register.cart_rows()["rows"]] == [("4902", 1), ("4901", 1)]
