import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .errors import ValidationError
from .models import Item, Receipt

RECEIPT_DATE_FORMAT = '%Y-%m-%d'
RECEIPT_TIME_FORMAT = '%H:%M'
RETAILER_PATTERN = re.compile(r"[\w\s&-]+")
DESCRIPTION_PATTERN = re.compile(r"[\w\s-]+")
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
TIME_PATTERN = re.compile(r"\d{2}:\d{2}", re.ASCII)
MONEY_PATTERN = re.compile(r"\d+\.\d{2}", re.ASCII)


def validate_retailer_name(retailer_name: str) -> str:
    """ Validates that the retailer name is non-blank and only uses word characters, spaces, '-' and '&' """
    if not retailer_name.strip():
        raise ValueError("must not be blank")
    if not RETAILER_PATTERN.fullmatch(retailer_name):
        raise ValueError("must only contain letters, digits, spaces, hyphens and '&'")
    return retailer_name


def validate_description(description: str) -> str:
    if not description.strip():
        raise ValueError("must not be blank")
    if not DESCRIPTION_PATTERN.fullmatch(description):
        raise ValueError("must only contain letters, digits, spaces and hyphens")
    return description


def parse_money(amount: str) -> Decimal:
    """ Parses an 'xx.xx' amount into an exact Decimal """
    if not MONEY_PATTERN.fullmatch(amount):
        raise ValueError("must be in 'xx.xx' format")
    return Decimal(amount)


def parse_date(value: str) -> date:
    # the pattern check keeps strptime from accepting e.g. '2022-1-1'
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError("must be in 'YYYY-MM-DD' format")
    try:
        return datetime.strptime(value, RECEIPT_DATE_FORMAT).date()
    except ValueError:
        raise ValueError("is not a valid calendar date")


def parse_time(value: str) -> time:
    if not TIME_PATTERN.fullmatch(value):
        raise ValueError("must be in 'HH:MM' format")
    try:
        return datetime.strptime(value, RECEIPT_TIME_FORMAT).time()
    except ValueError:
        raise ValueError("is not a valid time of day")


def _field(errors: Dict[str, str], path: str, value: Any, parser: Callable[[str], Any]) -> Optional[Any]:
    """ Runs parser on a string field, recording its ValueError message under path """
    if value is None:
        errors[path] = "is required"
        return None
    if not isinstance(value, str):
        errors[path] = "must be a string"
        return None
    try:
        return parser(value)
    except ValueError as e:
        errors[path] = str(e)
        return None


def _parse_items(errors: Dict[str, str], value: Any) -> List[Item]:
    if value is None:
        errors["items"] = "is required"
        return []
    if not isinstance(value, list):
        errors["items"] = "must be a list"
        return []
    if len(value) < 1:
        errors["items"] = "at least one item is required"
        return []
    items = []
    for index, entry in enumerate(value):
        path = f"items[{index}]"
        if not isinstance(entry, dict):
            errors[path] = "must be an object"
            continue
        description = _field(errors, f"{path}.shortDescription", entry.get("shortDescription"), validate_description)
        price = _field(errors, f"{path}.price", entry.get("price"), parse_money)
        if description is not None and price is not None:
            items.append(Item(short_description=description, price=price))
    return items


def parse_receipt(payload: Any) -> Receipt:
    """
    Validates a decoded JSON receipt body and converts it into a Receipt.
    Every malformed field is reported at once through ValidationError.errors,
    keyed by its JSON path.
    """
    if not isinstance(payload, dict):
        raise ValidationError({"receipt": "must be a JSON object"})

    errors: Dict[str, str] = {}
    retailer = _field(errors, "retailer", payload.get("retailer"), validate_retailer_name)
    purchase_date = _field(errors, "purchaseDate", payload.get("purchaseDate"), parse_date)
    purchase_time = _field(errors, "purchaseTime", payload.get("purchaseTime"), parse_time)
    items = _parse_items(errors, payload.get("items"))
    total = _field(errors, "total", payload.get("total"), parse_money)

    if errors:
        raise ValidationError(errors)
    return Receipt(
        retailer=retailer,
        purchase_date=purchase_date,
        purchase_time=purchase_time,
        items=tuple(items),
        total=total,
    )
