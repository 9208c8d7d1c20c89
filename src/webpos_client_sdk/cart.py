from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .cart_validation import MAX_QUANTITY, CartValidationError, ValidationIssue, parse_quantity
from .models import Product


@dataclass
class CartLine:
    product_id: int
    code: str
    name: str
    unit_price: int
    quantity: int = 1

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    @classmethod
    def from_product(cls, product: Product) -> "CartLine":
        return cls(
            product_id=product.id,
            code=product.code,
            name=product.name,
            unit_price=product.unit_price,
        )


class Cart:
    """Session cart, one line per product code.

    Lines keep the order in which their code was first added. The backend has
    no quantity column, so the cart is the only place quantities live until
    checkout expands them into one detail per unit.
    """

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, code: object) -> bool:
        return code in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, code: str) -> CartLine | None:
        return self._lines.get(code)

    def add_or_increment(self, product: Product) -> CartLine:
        line = self._lines.get(product.code)
        if line is None:
            line = CartLine.from_product(product)
            self._lines[product.code] = line
            return line
        if line.quantity >= MAX_QUANTITY:
            line.quantity = MAX_QUANTITY
            raise CartValidationError(
                [
                    ValidationIssue(
                        code=product.code,
                        field="quantity",
                        reason=f"quantity is already at the maximum of {MAX_QUANTITY}",
                    )
                ]
            )
        line.quantity += 1
        return line

    def remove(self, code: str) -> None:
        self._lines.pop(code, None)

    def set_quantity(self, code: str, quantity: int | str) -> CartLine:
        value = parse_quantity(quantity, code)
        line = self._lines.get(code)
        if line is None:
            raise CartValidationError(
                [ValidationIssue(code=code, field="code", reason="no cart line for this code")]
            )
        line.quantity = value
        return line

    def clear(self) -> None:
        self._lines.clear()

    def total(self) -> int:
        return sum(line.line_total for line in self._lines.values())

    def unit_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def render(self) -> dict[str, object]:
        return {
            "count": len(self._lines),
            "line_total": self.total(),
            "rows": [
                {
                    "code": line.code,
                    "name": line.name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in self._lines.values()
            ],
        }
