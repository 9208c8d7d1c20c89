from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from ..exceptions import NotFoundError
from ..models import Product
from .base import BaseClient

logger = logging.getLogger(__name__)


@dataclass
class CatalogClient(BaseClient):
    module: str = "catalog"

    def get_product_by_code(self, code: str) -> Product:
        data = self._request(
            "GET",
            f"/products-by-code/{quote(code, safe='')}",
            operation="get_product_by_code",
        )
        return self._parse(data, Product, "product")

    def lookup(self, code: str) -> Product | None:
        """Resolve a product code; ``None`` means the catalog has no such code.

        Every call goes to the catalog service. Transport and server failures
        propagate as :class:`~webpos_client_sdk.exceptions.ApiError`.
        """
        try:
            return self.get_product_by_code(code)
        except NotFoundError:
            logger.info("product_not_found", extra={"code": code})
            return None
