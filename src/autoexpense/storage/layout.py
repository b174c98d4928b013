"""Spreadsheet layout: tab names, column blocks and row mapping.

The remote store keeps transactions on a "Transactions" tab with a fixed
9-column header and all reference data side by side on a "Configuration"
tab, one column block per collection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from autoexpense.core.ids import id_from_timestamp
from autoexpense.storage.collections import Collection

logger = logging.getLogger(__name__)

TRANSACTIONS_SHEET = "Transactions"
CONFIG_SHEET = "Configuration"
SHEET_TITLES = [TRANSACTIONS_SHEET, CONFIG_SHEET]

TRANSACTION_HEADERS = [
    "Date",
    "Merchant",
    "Amount",
    "Category",
    "Payment Method",
    "Type",
    "Status",
    "Notes",
    "Created At",
]
CATEGORY_HEADERS = ["ID", "Name", "Icon", "Color", "Description"]


@dataclass(frozen=True)
class Block:
    """A rectangular column block with a header row."""

    sheet: str
    first_col: str
    last_col: str
    headers: tuple[str, ...]
    fields: tuple[str, ...]

    @property
    def header_range(self) -> str:
        return f"{self.sheet}!{self.first_col}1:{self.last_col}1"

    @property
    def data_range(self) -> str:
        return f"{self.sheet}!{self.first_col}2:{self.last_col}"

    def row_range(self, row_number: int) -> str:
        return f"{self.sheet}!{self.first_col}{row_number}:{self.last_col}{row_number}"

    def rows_range(self, count: int) -> str:
        return f"{self.sheet}!{self.first_col}2:{self.last_col}{count + 1}"


BLOCKS: dict[Collection, Block] = {
    Collection.TRANSACTIONS: Block(
        TRANSACTIONS_SHEET,
        "A",
        "I",
        tuple(TRANSACTION_HEADERS),
        (
            "occurred_at",
            "merchant",
            "amount",
            "category",
            "payment_method",
            "type",
            "status",
            "notes",
            "created_at",
        ),
    ),
    Collection.CATEGORIES: Block(
        CONFIG_SHEET, "A", "E", tuple(CATEGORY_HEADERS), ("id", "name", "icon", "color", "description")
    ),
    Collection.PAYMENT_METHODS: Block(
        CONFIG_SHEET,
        "G",
        "L",
        ("ID", "Name", "Type", "Icon", "Color", "Last 4"),
        ("id", "name", "type", "icon", "color", "last4"),
    ),
    Collection.KEYWORDS: Block(
        CONFIG_SHEET, "N", "P", ("ID", "Keyword", "Category"), ("id", "keyword", "category")
    ),
    Collection.APPROVED_SENDERS: Block(
        CONFIG_SHEET,
        "R",
        "T",
        ("Sender", "Payment Method", "Category"),
        ("sender", "payment_method", "category"),
    ),
}


def item_to_row(collection: Collection, item: dict) -> list[str]:
    block = BLOCKS[collection]
    return ["" if item.get(field) is None else str(item[field]) for field in block.fields]


def row_to_item(collection: Collection, row: list, row_number: int) -> dict:
    """Map a sheet row back to an item dict.

    Transactions get their id from the Created At column, which is written
    from the id at creation. Rows without a usable Created At fall back to a
    row-position id.
    """
    block = BLOCKS[collection]
    cells = [str(cell) for cell in row] + [""] * (len(block.fields) - len(row))
    item: dict = {
        field: (value if value != "" else None)
        for field, value in zip(block.fields, cells)
    }

    if collection is Collection.APPROVED_SENDERS:
        return item
    if collection is not Collection.TRANSACTIONS:
        return {key: value or "" for key, value in item.items()}

    item = {key: value for key, value in item.items() if value is not None}
    item["id"] = f"row-{row_number}"
    if item.get("created_at"):
        try:
            item["id"] = id_from_timestamp(datetime.fromisoformat(item["created_at"]))
        except ValueError:
            logger.warning("Unparseable Created At cell", extra={"row": row_number})
    return item


def is_blank_row(row: list) -> bool:
    return not any(str(cell).strip() for cell in row)
