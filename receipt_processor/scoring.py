import math
import re
from datetime import date, time
from decimal import Context, Decimal, localcontext
from typing import Sequence

from .models import Item, Receipt

POINTS_RETAILER_NAME_ALPHANUM_CHARACTER = 1
POINTS_TOTAL_HAS_NO_CENTS = 50
POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS = 25
POINTS_ITEMS_COUNT = 5
POINTS_ITEM_DESCRIPTION = Decimal("0.2")
POINTS_ODD_PURCHASE_DAY = 6
POINTS_VALID_PURCHASE_HOUR = 10
REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR = 3
REWARD_TOTAL_QUARTER = Decimal("0.25")
# both ends exclusive
REWARD_TIME_START = time(14, 0)
REWARD_TIME_END = time(16, 0)

ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")


def exact_context(amount: Decimal):
    """ Decimal context wide enough that the scoring arithmetic on amount is never rounded """
    sign, digits, exponent = amount.as_tuple()
    return localcontext(Context(prec=len(digits) + max(exponent, 0) + 4))


def score_retailer(retailer_name: str) -> int:
    """ 1 point for every ASCII letter or digit in the retailer name """
    return len(ALPHANUMERIC.findall(retailer_name)) * POINTS_RETAILER_NAME_ALPHANUM_CHARACTER


def score_total(total: Decimal) -> int:
    """ Round-dollar and quarter-multiple bonuses; a round total earns both """
    points = 0
    with exact_context(total):
        if total % 1 == 0:
            points += POINTS_TOTAL_HAS_NO_CENTS
        if total % REWARD_TOTAL_QUARTER == 0:
            points += POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS
    return points


def score_item_description(item: Item) -> int:
    length = len(item.short_description.strip())
    if length > 0 and length % REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR == 0:
        # exact product, so e.g. 15.00 * 0.2 is 3 before rounding up
        with exact_context(item.price):
            return math.ceil(item.price * POINTS_ITEM_DESCRIPTION)
    return 0


def score_items(items: Sequence[Item]) -> int:
    """ Pair bonus for the item count plus the description-length bonus per item """
    points = (len(items) // 2) * POINTS_ITEMS_COUNT
    for item in items:
        points += score_item_description(item)
    return points


def score_date_time(purchase_date: date, purchase_time: time) -> int:
    points = 0
    if purchase_date.day % 2 != 0:
        points += POINTS_ODD_PURCHASE_DAY
    if REWARD_TIME_START < purchase_time < REWARD_TIME_END:
        points += POINTS_VALID_PURCHASE_HOUR
    return points


def calculate_points(receipt: Receipt) -> int:
    """ Calculates points earned from each component of the receipt """
    points = 0
    points += score_retailer(receipt.retailer)
    points += score_total(receipt.total)
    points += score_items(receipt.items)
    points += score_date_time(receipt.purchase_date, receipt.purchase_time)
    return points
