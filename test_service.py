import itertools
from concurrent.futures import ThreadPoolExecutor
from datetime import date, time
from decimal import Decimal

import pytest

from receipt_processor.errors import ReceiptNotFound
from receipt_processor.models import Item, Receipt
from receipt_processor.scoring import calculate_points
from receipt_processor.service import Err, Ok, ReceiptService
from receipt_processor.store import InMemoryReceiptStore


@pytest.fixture
def receipt():
    return Receipt(
        retailer="M&M Corner Market",
        purchase_date=date(2022, 3, 20),
        purchase_time=time(14, 33),
        items=(Item("Gatorade", Decimal("2.25")),) * 4,
        total=Decimal("9.00"),
    )


@pytest.fixture
def store():
    return InMemoryReceiptStore()


def test_submit_then_get_points(store, receipt):
    service = ReceiptService(store)
    receipt_id = service.submit(receipt)
    result = service.get_points(receipt_id)
    assert result == Ok(109)
    assert result.unwrap() == calculate_points(receipt)


def test_submit_writes_one_record(store, receipt):
    service = ReceiptService(store, id_factory=lambda: "fixed-id")
    assert service.submit(receipt) == "fixed-id"
    assert len(store) == 1
    assert store.get("fixed-id").receipt == receipt


def test_get_points_unknown_id(store):
    result = ReceiptService(store).get_points("invalid-id")
    assert isinstance(result, Err)
    assert result.error.receipt_id == "invalid-id"
    assert str(result.error) == "Receipt with ID 'invalid-id' not found"
    with pytest.raises(ReceiptNotFound):
        result.unwrap()


def test_distinct_receipts_get_distinct_ids(store, receipt):
    service = ReceiptService(store)
    other = Receipt(
        retailer="Target",
        purchase_date=date(2022, 1, 2),
        purchase_time=time(13, 13),
        items=(Item("Pepsi - 12-oz", Decimal("1.25")),),
        total=Decimal("1.25"),
    )
    first_id = service.submit(receipt)
    second_id = service.submit(other)
    assert first_id != second_id
    assert service.get_points(first_id) == Ok(109)
    assert service.get_points(second_id) == Ok(31)


def test_duplicates_kept_apart_by_default(store, receipt):
    service = ReceiptService(store)
    assert service.submit(receipt) != service.submit(receipt)
    assert len(store) == 2


def test_duplicate_detection_returns_first_id(store, receipt):
    ids = itertools.count()
    service = ReceiptService(store, duplicate_detection=True, id_factory=lambda: f"id-{next(ids)}")
    assert service.submit(receipt) == "id-0"
    assert service.submit(receipt) == "id-0"
    assert len(store) == 1


def test_duplicate_detection_concurrent_submissions(store, receipt):
    service = ReceiptService(store, duplicate_detection=True)
    with ThreadPoolExecutor(max_workers=20) as pool:
        receipt_ids = set(pool.map(service.submit, [receipt] * 200))
    assert len(receipt_ids) == 1
    assert len(store) == 1
