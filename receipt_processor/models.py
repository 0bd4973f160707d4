from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Tuple


@dataclass(frozen=True)
class Item:
    short_description: str
    price: Decimal


@dataclass(frozen=True)
class Receipt:
    retailer: str
    purchase_date: date
    purchase_time: time
    items: Tuple[Item, ...]
    total: Decimal

    def duplicate_key(self) -> Tuple[str, date, time]:
        """ Receipts sharing this key are treated as the same purchase when duplicate detection is on """
        return self.retailer, self.purchase_date, self.purchase_time


@dataclass(frozen=True)
class StoredReceipt:
    receipt: Receipt
    points: int
