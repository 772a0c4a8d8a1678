"""Menu-driven text console for the store inventory."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Optional, Sequence

from storelib import (
    IndexOutOfRange,
    InventoryStore,
    PerishableRecord,
    StandardRecord,
    StoreError,
    load_store_config,
)

MAX_RETRY_ATTEMPTS = 3

MENU = """
INVENTORY MANAGEMENT MENU
  1. Add New Product        2. View All Inventory
  3. Search for Product     4. Display Summary
  5. Remove Product         6. Exit Application
"""


class InventoryConsole:
    """Prompts for catalog operations and prints their results."""

    def __init__(
        self,
        store: InventoryStore,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.store = store
        self._input = input_fn
        self._output = output

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------
    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def ask_text(self, prompt: str) -> str:
        value = self.ask(prompt)
        while not value:
            self._output("Input cannot be empty. Please try again.")
            value = self.ask(prompt)
        return value

    def ask_int(self, prompt: str, minimum: int, maximum: int) -> int:
        for _ in range(MAX_RETRY_ATTEMPTS):
            try:
                value = int(self.ask(prompt))
            except ValueError:
                self._output("Please enter a valid number.")
                continue
            if minimum <= value <= maximum:
                return value
            self._output(f"Please enter a value between {minimum} and {maximum}.")
        self._output("Maximum retry attempts reached. Using default value.")
        return minimum

    def ask_decimal(self, prompt: str, minimum: Decimal, maximum: Decimal | None = None) -> Decimal:
        for _ in range(MAX_RETRY_ATTEMPTS):
            try:
                value = Decimal(self.ask(prompt))
            except InvalidOperation:
                self._output("Please enter a valid number.")
                continue
            if value.is_finite() and value >= minimum and (maximum is None or value <= maximum):
                return value
            upper = f" and {maximum:.2f}" if maximum is not None else ""
            self._output(f"Please enter a value of at least {minimum:.2f}{upper}.")
        self._output("Maximum retry attempts reached. Using default value.")
        return minimum

    def ask_date(self, prompt: str) -> date:
        for _ in range(MAX_RETRY_ATTEMPTS):
            raw = self.ask(prompt)
            try:
                value = date.fromisoformat(raw)
            except ValueError:
                self._output("Invalid date format. Please use YYYY-MM-DD format.")
                continue
            if value < date.today():
                self._output("Warning: Date is in the past.")
            return value
        self._output("Maximum retry attempts reached. Using today's date.")
        return date.today()

    def confirm(self, prompt: str) -> bool:
        return self.ask(prompt).lower().startswith("y")

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------
    def add_product(self) -> None:
        name = self.ask_text("Enter product name: ")
        price = self.ask_decimal("Enter price: ", Decimal("0.01"))
        quantity = self.ask_int("Enter quantity: ", 1, 2**31 - 1)
        discount = self.ask_decimal("Enter discount (%): ", Decimal("0"), Decimal("100")) / 100
        if self.confirm("Is this a perishable product? (y/n): "):
            expires = self.ask_date("Enter expiration date (YYYY-MM-DD): ")
            record = PerishableRecord(name, price, quantity, expires, discount)
        else:
            record = StandardRecord(name, price, quantity, discount)
        self.store.add(record)
        self._output("Product added successfully!")

    def view_inventory(self) -> bool:
        records = self.store.list()
        if not records:
            self._output("Inventory is empty.")
            return False
        for idx, record in enumerate(records):
            line = str(record)
            if len(line) > 100:
                line = line[:97] + "..."
            self._output(f"{idx:>3} | {line}")
        return True

    def search_product(self) -> None:
        name = self.ask_text("Enter product name to search: ")
        record = self.store.find_by_name(name)
        self._output(str(record) if record is not None else "Product not found.")

    def display_summary(self) -> None:
        totals = self.store.aggregates()
        self._output(f"Total Quantity: {totals.total_quantity}")
        self._output(f"Total Gross Price: ${totals.total_gross}")
        self._output(f"Total Price With Perishable Discount: ${totals.total_with_discount}")
        self._output(f"Total Price with additional 15% discount: ${totals.total_net}")

    def remove_product(self) -> None:
        if not self.view_inventory():
            return
        index = self.ask_int("Enter the index of the product to remove: ", 0, len(self.store) - 1)
        try:
            self.store.remove_at(index)
        except IndexOutOfRange as exc:
            self._output(str(exc))
            return
        self._output("Product removed successfully!")

    def refresh_from_template(self) -> bool:
        try:
            refreshed = self.store.refresh_from_template(
                confirm=lambda: self.confirm("Do you want to overwrite it with the COMPLETE template? (y/n): ")
            )
        except StoreError as exc:
            self._output(f"Refresh failed: {exc}")
            return False
        if refreshed:
            self._output("Inventory reset to template.")
        return refreshed

    def run(self) -> None:
        """Show the menu until the user exits, then close the store."""
        actions = {
            1: self.add_product,
            2: self.view_inventory,
            3: self.search_product,
            4: self.display_summary,
            5: self.remove_product,
        }
        try:
            while True:
                totals = self.store.aggregates()
                self._output(f"Current Inventory: {len(self.store)} items (Total value: ${totals.total_gross})")
                self._output(MENU)
                choice = self.ask_int("Enter your selection: ", 1, 6)
                if choice == 6:
                    self._output("Saving inventory and exiting...")
                    break
                try:
                    actions[choice]()
                except StoreError as exc:
                    self._output(f"Operation failed: {exc}")
        finally:
            self.store.flush_and_close()
            self._output("Goodbye!")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Store inventory console")
    parser.add_argument("-r", "--refresh", action="store_true", help="reset the inventory to the template dataset")
    args = parser.parse_args(argv)

    config = load_store_config(Path.cwd())
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    store = InventoryStore.from_config(config)
    store.initialize()
    console = InventoryConsole(store)
    if args.refresh:
        console.refresh_from_template()
    console.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
