from datetime import date, time
from decimal import Decimal

import pytest

from receipt_processor.models import Item, Receipt
from receipt_processor.scoring import (
    calculate_points,
    score_date_time,
    score_items,
    score_retailer,
    score_total,
)


def make_receipt(**overrides):
    fields = {
        "retailer": "Target",
        "purchase_date": date(2022, 1, 1),
        "purchase_time": time(13, 1),
        "items": (
            Item("Mountain Dew 12PK", Decimal("6.49")),
            Item("Emils Cheese Pizza", Decimal("12.25")),
        ),
        "total": Decimal("35.35"),
    }
    fields.update(overrides)
    return Receipt(**fields)


@pytest.mark.parametrize("retailer, expected", [
    ("Target", 6),
    ("M&M Corner Market", 14),
    ("  - & -  ", 0),
    ("7-Eleven", 7),
    ("Café", 3),
])
def test_score_retailer(retailer, expected):
    assert score_retailer(retailer) == expected


@pytest.mark.parametrize("total, expected", [
    ("100.00", 75),
    ("0.00", 75),
    ("100.25", 25),
    ("75.50", 25),
    ("9.75", 25),
    ("100.10", 0),
    ("35.35", 0),
])
def test_score_total(total, expected):
    assert score_total(Decimal(total)) == expected


@pytest.mark.parametrize("total, expected", [
    ("1" + "0" * 30 + ".00", 75),
    ("9" * 30 + ".75", 25),
    ("9" * 30 + ".10", 0),
])
def test_score_total_long_amounts(total, expected):
    assert score_total(Decimal(total)) == expected


@pytest.mark.parametrize("count, expected", [(0, 0), (1, 0), (2, 5), (4, 10), (5, 10)])
def test_score_items_pair_bonus(count, expected):
    # 'Pepsi' has 5 characters, so only the pair bonus applies
    items = [Item("Pepsi", Decimal("1.00"))] * count
    assert score_items(items) == expected


@pytest.mark.parametrize("description, price, expected", [
    ("Emils Cheese Pizza", "12.25", 3),
    ("   Klarbrunn 12-PK 12 FL OZ  ", "12.00", 3),
    ("Mountain Dew 12PK", "6.49", 0),
    ("ABC", "15.00", 3),
    ("ABC", "15.01", 4),
    ("ABC", "0.00", 0),
    ("Dasani", "1.40", 1),
    ("   ", "15.00", 0),
    ("", "15.00", 0),
])
def test_score_items_description_bonus(description, price, expected):
    assert score_items([Item(description, Decimal(price))]) == expected


def test_score_items_description_bonus_long_price():
    # 0.2 * 5000000000000000000000000000000.05 = 10**30 + 0.01, rounded up
    price = Decimal("5000000000000000000000000000000.05")
    assert score_items([Item("ABC", price)]) == 10 ** 30 + 1


@pytest.mark.parametrize("purchase_time, expected", [
    (time(14, 0), 0),
    (time(14, 1), 10),
    (time(15, 0), 10),
    (time(15, 59), 10),
    (time(16, 0), 0),
    (time(13, 59), 0),
])
def test_score_date_time_afternoon_window(purchase_time, expected):
    assert score_date_time(date(2022, 1, 2), purchase_time) == expected


def test_score_date_time_odd_day():
    assert score_date_time(date(2022, 1, 31), time(9, 0)) == 6
    assert score_date_time(date(2022, 1, 30), time(9, 0)) == 0
    assert score_date_time(date(2022, 3, 1), time(15, 0)) == 16


def test_calculate_points_two_item_receipt():
    # 6 retailer + 5 pair + 3 pizza description + 6 odd day
    assert calculate_points(make_receipt()) == 20


def test_calculate_points_every_rule():
    receipt = make_receipt(
        retailer="Target",
        purchase_date=date(2022, 3, 21),
        purchase_time=time(14, 33),
        items=(Item("Gatorade", Decimal("2.25")), Item("Dasani", Decimal("2.75"))),
        total=Decimal("5.00"),
    )
    # 6 + 50 + 25 + 5 + 1 + 6 + 10
    assert calculate_points(receipt) == 103


def test_calculate_points_is_deterministic():
    receipt = make_receipt()
    assert len({calculate_points(receipt) for _ in range(10)}) == 1
