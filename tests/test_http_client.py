from __future__ import annotations

import pytest
import requests
import responses

from webpos_client_sdk.config import ClientConfig
from webpos_client_sdk.exceptions import InvalidResponseError, NotFoundError, ServerError, TransportError
from webpos_client_sdk.http_client import HttpClient


@responses.activate
def test_request_joins_base_url_and_prefix(http: HttpClient) -> None:
    responses.add(responses.GET, "https://api.example.com/api/transactions/7", json={"TRD_ID": 7}, status=200)

    payload = http.request("GET", "/transactions/7", module="transactions", operation="get_transaction")

    assert payload == {"TRD_ID": 7}
    assert responses.calls[0].request.headers["Accept"] == "application/json"
    assert http.last_operation is not None
    assert http.last_operation.result == "success"
    assert http.last_operation.status_code == 200


@responses.activate
def test_request_without_prefix() -> None:
    http = HttpClient(ClientConfig(env_name="test", api_base_url="https://pos.example.com/root", api_prefix=""))
    responses.add(responses.GET, "https://pos.example.com/root/transactions/1", json={"TRD_ID": 1}, status=200)

    assert http.request("GET", "transactions/1") == {"TRD_ID": 1}


@responses.activate
def test_empty_body_returns_none(http: HttpClient) -> None:
    responses.add(responses.POST, "https://api.example.com/api/transactions/1/details", body="", status=204)

    assert http.request("POST", "/transactions/1/details", json_body={"DTL_ID": 1}) is None


@responses.activate
def test_error_status_is_mapped_without_retry(http: HttpClient) -> None:
    responses.add(responses.GET, "https://api.example.com/api/products-by-code/X", json={"detail": "nope"}, status=404)
    responses.add(responses.GET, "https://api.example.com/api/transactions/1", body="boom", status=500)

    with pytest.raises(NotFoundError):
        http.request("GET", "/products-by-code/X")
    with pytest.raises(ServerError) as excinfo:
        http.request("GET", "/transactions/1")

    assert excinfo.value.message == "boom"
    assert len(responses.calls) == 2
    assert http.last_operation is not None
    assert http.last_operation.result == "error"


@responses.activate
def test_network_failure_becomes_transport_error(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        "https://api.example.com/api/transactions/1",
        body=requests.ConnectionError("connection refused"),
    )

    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/transactions/1")

    assert excinfo.value.status_code == 0
    assert excinfo.value.details == {"type": "ConnectionError"}
    assert len(responses.calls) == 1


@responses.activate
def test_success_with_non_json_body_raises_invalid_response(http: HttpClient) -> None:
    responses.add(responses.POST, "https://api.example.com/api/transactions/1/details", body="created", status=201)

    with pytest.raises(InvalidResponseError) as excinfo:
        http.request("POST", "/transactions/1/details", json_body={"DTL_ID": 1})

    assert excinfo.value.status_code == 201
    assert excinfo.value.details == {"body": "created"}
    assert http.last_operation is not None
    assert http.last_operation.result == "invalid_response"
