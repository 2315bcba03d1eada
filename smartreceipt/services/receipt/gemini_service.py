"""
Receipt Interpreter using Gemini

DESIGN DECISION: We send the receipt photo straight to a Gemini
vision model and ask for four fields as JSON:
1. amount
2. merchant
3. category (free text, a best guess)
4. date (YYYY-MM-DD)

This service handles:
1. Checking the image (type and size) before any network call
2. Calling the model with a timeout
3. Parsing the reply tolerantly into a ReceiptScan
4. Turning every failure into a ReceiptScanError subclass

CRITICAL: The result is a GUESS. It is only ever used to pre-fill
the form; the user reviews it and presses save. Nothing here writes
to the record store, and nothing here retries.
"""

import asyncio
import base64
import binascii
import json
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import google.generativeai as genai

from smartreceipt.config import get_settings
from smartreceipt.models.expense import ImageUpload, ReceiptScan


RECEIPT_PROMPT = (
    "Extract information from this receipt. Focus on amount, merchant name, "
    "category, and date. If data is missing, make a best guess or use today's date.\n"
    "Respond with ONLY a JSON object in this exact format:\n"
    '{"amount": 12.5, "merchant": "Store name", "category": "Food & Dining", '
    '"date": "YYYY-MM-DD"}\n'
    "Prefer one of these categories: Food & Dining, Shopping, Transportation, "
    "Entertainment, Utilities, Health, Other."
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "amount": {"type": "NUMBER"},
        "merchant": {"type": "STRING"},
        "category": {"type": "STRING"},
        "date": {
            "type": "STRING",
            "description": "ISO format date string YYYY-MM-DD",
        },
    },
    "required": ["amount", "merchant", "category", "date"],
}

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]+;base64,", re.IGNORECASE)
_AMOUNT_NOISE = re.compile(r"[^\d.\-]")


class ReceiptScanError(Exception):
    """Base exception for receipt scanning errors."""
    pass


class UnsupportedImageError(ReceiptScanError):
    """Image type or size is not acceptable."""
    pass


class ServiceCallError(ReceiptScanError):
    """The model could not be reached or refused the request."""
    pass


class ExtractionFailedError(ReceiptScanError):
    """The model replied, but nothing usable could be read from it."""
    pass


class ScanTimeoutError(ReceiptScanError):
    """The model did not answer in time."""
    pass


def _safe_decimal(value: Any) -> Optional[Decimal]:
    """Safely convert a value to a non-negative Decimal."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            value = _AMOUNT_NOISE.sub("", value)
            if not value:
                return None
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def _safe_date(value: Any) -> Optional[date]:
    """Safely convert a value to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        # Try common formats
        for fmt in ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%m/%d/%Y"]:
            try:
                return datetime.strptime(text[:10], fmt).date()
            except ValueError:
                continue
    return None


def _safe_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _extract_json_object(text: str) -> dict:
    """Find the JSON object in a model reply (fenced or not)."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [line for line in lines[1:] if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)

    start = cleaned.find("{")
    end = cleaned.rfind("}") + 1
    if start < 0 or end <= start:
        raise ExtractionFailedError("Receipt reply did not contain a JSON object")

    try:
        data = json.loads(cleaned[start:end])
    except json.JSONDecodeError as e:
        raise ExtractionFailedError(f"Receipt reply was not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionFailedError("Receipt reply was not a JSON object")
    return data


def parse_receipt_response(text: str) -> ReceiptScan:
    """
    Turn the model's reply into a ReceiptScan.

    Fields that cannot be read become None. If neither an amount nor
    a merchant could be read, the scan is treated as failed.
    """
    data = _extract_json_object(text or "")

    scan = ReceiptScan(
        amount=_safe_decimal(data.get("amount")),
        merchant=_safe_text(data.get("merchant")),
        category=_safe_text(data.get("category")),
        date=_safe_date(data.get("date")),
        raw_response=text,
    )
    if not scan.has_data:
        raise ExtractionFailedError(
            "No meaningful data could be read from this receipt"
        )
    return scan


def decode_image(image: Union[bytes, str]) -> bytes:
    """Accept raw bytes, base64 text or a base64 data URL."""
    if isinstance(image, bytes):
        return image
    payload = _DATA_URL_PREFIX.sub("", image.strip())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UnsupportedImageError(f"Image is not valid base64: {e}") from e


class GeminiReceiptService:
    """
    Receipt interpreter backed by Gemini.

    IMPORTANT BOUNDARIES:
    1. This service ONLY reads the receipt - it never saves anything
    2. Failures always surface as ReceiptScanError
    3. Category guesses are passed through untouched
    """

    def __init__(self, model: Optional[Any] = None):
        """
        Args:
            model: A ready GenerativeModel (or a stand-in with
                   `generate_content_async`). Built from settings on
                   first use when omitted.
        """
        self._settings = get_settings().gemini
        self._app_settings = get_settings().app
        self._model = model

    @property
    def is_available(self) -> bool:
        return self._model is not None or self._settings.is_configured

    def _get_model(self):
        """Get or create the Gemini model."""
        if self._model is None:
            if not self._settings.is_configured:
                raise ReceiptScanError(
                    "Receipt scanning is not configured. Set GEMINI_API_KEY."
                )
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                    "response_mime_type": "application/json",
                    "response_schema": RESPONSE_SCHEMA,
                },
            )
        return self._model

    def check_image(self, image_bytes: bytes, mime_type: str) -> ImageUpload:
        """
        Reject images we should not send.

        Raises:
            UnsupportedImageError: Empty, too large, or wrong type
        """
        upload = ImageUpload(file_size_bytes=len(image_bytes), mime_type=mime_type)

        if upload.file_size_bytes == 0:
            raise UnsupportedImageError("The image is empty")
        if upload.file_size_bytes > self._app_settings.max_upload_size_bytes:
            raise UnsupportedImageError(
                f"The image is larger than {self._app_settings.max_upload_size_mb} MB"
            )
        allowed = self._app_settings.supported_mime_types
        if upload.mime_type not in allowed:
            raise UnsupportedImageError(
                f"Unsupported image type: {upload.mime_type}. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )
        return upload

    async def scan_receipt(
        self,
        image: Union[bytes, str],
        mime_type: str = "image/jpeg",
    ) -> ReceiptScan:
        """
        Read amount, merchant, category and date from a receipt photo.

        Raises:
            UnsupportedImageError: The image was rejected before sending
            ScanTimeoutError: The model took too long
            ServiceCallError: The call itself failed
            ExtractionFailedError: The reply held nothing usable
        """
        image_bytes = decode_image(image)
        upload = self.check_image(image_bytes, mime_type)
        model = self._get_model()

        contents = [
            {"mime_type": upload.mime_type, "data": image_bytes},
            RECEIPT_PROMPT,
        ]
        try:
            response = await asyncio.wait_for(
                model.generate_content_async(contents),
                timeout=self._settings.scan_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ScanTimeoutError(
                f"Receipt scan timed out after {self._settings.scan_timeout_seconds:g}s"
            ) from e
        except Exception as e:
            raise ServiceCallError(f"Receipt service call failed: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the reply was blocked or empty
            raise ExtractionFailedError(f"Receipt reply had no text: {e}") from e

        return parse_receipt_response(text)
