from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SDK_SRC = BASE_DIR / "src"

sys.path.insert(0, str(SDK_SRC))

from webpos_client_sdk.config import ClientConfig  # noqa: E402
from webpos_client_sdk.http_client import HttpClient  # noqa: E402

BASE_URL = "https://api.example.com"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL)


@pytest.fixture
def http(config: ClientConfig) -> HttpClient:
    return HttpClient(config)
