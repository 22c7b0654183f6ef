"""
==============================================================================
Barcode Decoder Adapter Module
==============================================================================

Turns camera frames into Detections for the classification pipeline.

Features:
---------
- Frame decoding with pyzbar (OpenCV images / numpy arrays)
- Image decoding from raw bytes and base64 payloads
- Symbology names normalized to the UPC_A / EAN_13 / QR_CODE style
- zbar reports UPC-A labels as EAN-13 with a leading zero; those are
  converted back to 12-digit UPC-A detections

The adapter never classifies or filters; every decoded text is returned.

==============================================================================
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Callable, Dict, List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import decode

from imei_scanner.core import exceptions
from imei_scanner.scanning.models import Detection, Region
from imei_scanner.scanning.record_factory import epoch_millis


# Module logger
logger = logging.getLogger(__name__)


# zbar symbology name -> reported format
SYMBOLOGY_NAMES: Dict[str, str] = {
    "EAN13": "EAN_13",
    "EAN8": "EAN_8",
    "UPCA": "UPC_A",
    "UPCE": "UPC_E",
    "CODE128": "CODE_128",
    "CODE39": "CODE_39",
    "CODE93": "CODE_93",
    "I25": "ITF",
    "QRCODE": "QR_CODE",
    "PDF417": "PDF_417",
    "DATABAR": "RSS_14",
    "DATABAR_EXP": "RSS_EXPANDED",
}


def normalize_symbology(zbar_type: str) -> str:
    """Map a zbar symbology name to the reported format."""
    return SYMBOLOGY_NAMES.get(zbar_type, zbar_type)


class BarcodeDecoder:
    """
    Decoder adapter around pyzbar.

    Attributes:
        _clock: Callable returning epoch milliseconds for detection timestamps

    Example:
        >>> decoder = BarcodeDecoder()
        >>> detections = decoder.decode_base64(payload["frame"])
        >>> [d.text for d in detections]
        ['356938035643809']
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or epoch_millis

    # =========================================================================
    # FRAME DECODING
    # =========================================================================

    def decode_frame(self, frame: np.ndarray) -> List[Detection]:
        """
        Decode every barcode visible in one frame.

        Args:
            frame: OpenCV image (numpy array)

        Returns:
            Detections in the order zbar reports them
        """
        if frame is None or frame.size == 0:
            return []

        timestamp = self._clock()
        detections = []

        for barcode in decode(frame):
            try:
                text = barcode.data.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug(f"Skipping non-UTF-8 {barcode.type} payload")
                continue

            symbology = normalize_symbology(barcode.type)
            if symbology == "EAN_13" and len(text) == 13 and text.startswith("0"):
                text = text[1:]
                symbology = "UPC_A"

            left, top, width, height = barcode.rect
            detections.append(Detection(
                text=text,
                format=symbology,
                region=Region(x=max(left, 0), y=max(top, 0), width=width, height=height),
                timestamp=timestamp,
            ))

        if detections:
            logger.debug(f"Decoded {len(detections)} barcodes from frame")
        return detections

    def decode_image_bytes(self, data: bytes) -> List[Detection]:
        """
        Decode an encoded image (JPEG, PNG, ...).

        Raises:
            AppException: INVALID_IMAGE if the bytes are not a readable image
        """
        buffer = np.frombuffer(data, np.uint8)
        frame = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None

        if frame is None:
            raise exceptions.invalid_image()

        return self.decode_frame(frame)

    def decode_base64(self, payload: str) -> List[Detection]:
        """
        Decode a base64 image, with or without a data-URL prefix.

        Raises:
            AppException: INVALID_IMAGE on bad base64 or image data
        """
        if "," in payload and payload.startswith("data:"):
            payload = payload.split(",", 1)[1]

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise exceptions.invalid_image()

        return self.decode_image_bytes(data)
