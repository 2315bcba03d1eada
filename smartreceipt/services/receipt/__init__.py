"""Receipt interpreter package."""

from smartreceipt.services.receipt.gemini_service import (
    ExtractionFailedError,
    GeminiReceiptService,
    ReceiptScanError,
    ScanTimeoutError,
    ServiceCallError,
    UnsupportedImageError,
    decode_image,
    parse_receipt_response,
)

__all__ = [
    "ExtractionFailedError",
    "GeminiReceiptService",
    "ReceiptScanError",
    "ScanTimeoutError",
    "ServiceCallError",
    "UnsupportedImageError",
    "decode_image",
    "parse_receipt_response",
]
