"""Key-value persistence of JSON values on top of the ``kv_store`` table."""
import json
import logging
from typing import Any

from sheepfold.database import StoredValue

logger = logging.getLogger(__name__)

SHEEP_KEY = "myfarm_sheep"
TRANS_KEY = "myfarm_transactions"
EVENTS_KEY = "myfarm_events"
STOCK_KEY = "myfarm_stock_status"


class KeyValueStore:
    """Get/set of named JSON-serializable values. No partial updates, no expiry."""

    def __init__(self, db):
        self.db = db

    def get(self, key: str) -> Any | None:
        """Return the decoded value for key, or None when the key was never written.

        Raises ValueError when the stored text is not valid JSON.
        """
        row = self.db.query(StoredValue).filter_by(key=key).first()
        if row is None:
            return None
        return json.loads(row.value)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        row = self.db.query(StoredValue).filter_by(key=key).first()
        if row:
            row.value = payload
        else:
            self.db.add(StoredValue(key=key, value=payload))
        self.db.commit()
        logger.debug("Stored %s (%d bytes)", key, len(payload))
