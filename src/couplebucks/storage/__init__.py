"""Receipt storage for couplebucks."""

from couplebucks.storage.receipts import LocalReceiptStore, ReceiptStore, create_receipt_store

__all__ = ["ReceiptStore", "LocalReceiptStore", "create_receipt_store"]
