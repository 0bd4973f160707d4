import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union
from uuid import uuid4

from .errors import ReceiptNotFound
from .models import Receipt, StoredReceipt
from .scoring import calculate_points
from .store import InMemoryReceiptStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    value: int

    def unwrap(self) -> int:
        return self.value


@dataclass(frozen=True)
class Err:
    error: ReceiptNotFound

    def unwrap(self) -> int:
        raise self.error


PointsResult = Union[Ok, Err]


def new_receipt_id() -> str:
    return str(uuid4())


class ReceiptService:
    """
    Assigns ids to submitted receipts and answers points lookups. The score is
    computed once at submission and stored next to the receipt; receipts are
    never modified afterwards, so the stored score always equals a fresh one.
    """

    def __init__(
        self,
        store: InMemoryReceiptStore,
        duplicate_detection: bool = False,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self.duplicate_detection = duplicate_detection
        self._id_factory = id_factory or new_receipt_id

    def submit(self, receipt: Receipt) -> str:
        receipt_id = self._id_factory()
        record = StoredReceipt(receipt=receipt, points=calculate_points(receipt))
        dedup_key = receipt.duplicate_key() if self.duplicate_detection else None
        stored_id = self._store.save(receipt_id, record, dedup_key)
        if stored_id != receipt_id:
            logger.warning(
                "Duplicate receipt for %s on %s %s, returning existing id %s",
                receipt.retailer, receipt.purchase_date, receipt.purchase_time, stored_id,
            )
        else:
            logger.info("Stored receipt %s (%d points)", stored_id, record.points)
        return stored_id

    def get_points(self, receipt_id: str) -> PointsResult:
        record = self._store.get(receipt_id)
        if record is None:
            logger.info("Receipt %s not found", receipt_id)
            return Err(ReceiptNotFound(receipt_id))
        logger.debug("Returning receipt %s points: %d", receipt_id, record.points)
        return Ok(record.points)
