from __future__ import annotations

import argparse
import logging
import shlex
from typing import Callable, TextIO

from .config import ConfigError, load_config
from .register import Register
from .session import ApiSession

HELP = """commands:
  <code>              look up a product code and add it to the cart
  rm <code>           remove a cart line
  qty <code> <n>      set a line quantity (1-99)
  list                show the cart
  buy                 register the cart and show the tax-included total
  quit                leave
"""


def _print_cart(register: Register, write: Callable[[str], None]) -> None:
    rendered = register.cart_rows()
    if not rendered["rows"]:
        write("cart is empty")
    for row in rendered["rows"]:
        write(f"{row['code']}  {row['name']}  {row['unit_price']} x {row['quantity']} = {row['line_total']}")
    write(f"total (tax excluded): {register.pre_tax_total()}")


def dispatch(register: Register, line: str, write: Callable[[str], None]) -> bool:
    try:
        parts = shlex.split(line)
    except ValueError as exc:
        write(f"could not parse command: {exc}")
        write("type help for the command list")
        return True
    if not parts:
        return True
    command, args = parts[0].lower(), parts[1:]
    if command in {"quit", "exit"}:
        return False
    if command == "help":
        write(HELP)
    elif command == "list":
        _print_cart(register, write)
    elif command == "rm" and len(args) == 1:
        register.remove(args[0])
        _print_cart(register, write)
    elif command == "qty" and len(args) == 2:
        outcome = register.change_quantity(args[0], args[1])
        if not outcome["ok"] and outcome.get("error"):
            write(outcome["error"])
        _print_cart(register, write)
    elif command == "buy":
        outcome = register.purchase()
        if outcome.get("error"):
            write(outcome["error"])
        if outcome.get("total_with_tax") is not None:
            write(register.status_message)
    else:
        outcome = register.lookup(line)
        if outcome["ok"]:
            product = outcome["product"]
            write(f"{product.name}  {product.unit_price}")
        else:
            write(outcome["error"])
    return True


def run(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    parser = argparse.ArgumentParser(prog="webpos-register", description="Line-oriented POS register")
    parser.add_argument("--env-file", default=None, help="optional .env file to load")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        config = load_config(args.env_file)
    except ConfigError as exc:
        print(f"configuration error: {exc}")
        return 2

    session = ApiSession(config)
    register = Register.from_session(session)
    if not register.start()["ok"]:
        print("warning: transaction could not be created; purchases are disabled")
    print(HELP)
    source = stdin
    try:
        while True:
            if source is None:
                try:
                    line = input("> ")
                except EOFError:
                    break
            else:
                line = source.readline()
                if not line:
                    break
            if not dispatch(register, line.strip(), print):
                break
    finally:
        register.close()
        session.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
