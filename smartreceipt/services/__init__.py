"""Services package."""

from smartreceipt.services.receipt import (
    ExtractionFailedError,
    GeminiReceiptService,
    ReceiptScanError,
    ScanTimeoutError,
    ServiceCallError,
    UnsupportedImageError,
)
from smartreceipt.services.storage import (
    DuplicateError,
    LocalRecordStore,
    MemoryRecordStore,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    # Receipt services
    "ExtractionFailedError",
    "GeminiReceiptService",
    "ReceiptScanError",
    "ScanTimeoutError",
    "ServiceCallError",
    "UnsupportedImageError",
    # Storage services
    "DuplicateError",
    "LocalRecordStore",
    "MemoryRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
]
