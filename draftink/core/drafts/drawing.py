"""
Decoding of the freehand drawing layer sent as a PNG data URL.
"""
import base64
import binascii
from typing import Optional

from draftink.core.errors import ValidationError

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def has_drawing_payload(data_url: Optional[str]) -> bool:
    """
    Blank or missing URLs carry no drawing.

    Raises:
        ValidationError: If the value is present but not a string
    """
    if data_url is None:
        return False
    if not isinstance(data_url, str):
        raise ValidationError("drawingDataUrl must be a string.")
    return bool(data_url.strip())


def decode_drawing_data_url(data_url: str) -> bytes:
    """
    Decode a ``data:image/png;base64,`` URL.

    Args:
        data_url: The data URL as sent by the editor

    Returns:
        The decoded image bytes

    Raises:
        ValidationError: On a different prefix or malformed base64
    """
    if not isinstance(data_url, str):
        raise ValidationError("drawingDataUrl must be a string.")
    value = data_url.strip()
    if value[:len(PNG_DATA_URL_PREFIX)].lower() != PNG_DATA_URL_PREFIX:
        raise ValidationError("drawingDataUrl must be a data:image/png;base64 URL.")

    payload = value[len(PNG_DATA_URL_PREFIX):]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid drawingDataUrl base64 payload.") from e
