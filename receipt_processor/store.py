import threading
from typing import Dict, Hashable, Optional

from .models import StoredReceipt


class InMemoryReceiptStore:
    """
    Thread-safe mapping of receipt id -> stored receipt. An optional secondary
    index maps a duplicate key to the id first saved under it; the check and the
    write happen under one lock so concurrent duplicates resolve to a single id.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, StoredReceipt] = {}
        self._ids_by_key: Dict[Hashable, str] = {}

    def save(self, receipt_id: str, record: StoredReceipt, dedup_key: Optional[Hashable] = None) -> str:
        """
        Stores the record under receipt_id and returns the id it is reachable by.
        If dedup_key is already indexed nothing is written and the existing id is returned.
        """
        with self._lock:
            if dedup_key is not None:
                existing_id = self._ids_by_key.get(dedup_key)
                if existing_id is not None:
                    return existing_id
                self._ids_by_key[dedup_key] = receipt_id
            self._records[receipt_id] = record
            return receipt_id

    def get(self, receipt_id: str) -> Optional[StoredReceipt]:
        with self._lock:
            return self._records.get(receipt_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
