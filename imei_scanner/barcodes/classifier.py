"""
==============================================================================
Barcode Classifier Module
==============================================================================

Determines the identifier type of decoded barcode text.

Shape rules are tried in a fixed priority order and the first match wins:

    1. 15 digits        -> IMEI    (vendor lookup, Luhn checksum)
    2. 14 hex chars     -> MEID    (vendor Unknown, checksum assumed)
    3. 12 digits        -> UPC-A   (GS1 checksum)
    4. 8 digits         -> UPC-E   (checksum assumed)
    5. 13 digits        -> EAN-13  (GS1 checksum)
    6. anything else    -> Unknown (not valid)

A shape match alone makes a code valid; the checksum outcome is reported
next to it and never rejects a code.

==============================================================================
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Tuple

from .checksums import (
    validate_ean13_checksum,
    validate_imei_checksum,
    validate_upc_a_checksum,
)
from .models import BarcodeType, ClassificationResult
from .vendors import UNKNOWN_VENDOR, get_imei_vendor


# Module logger
logger = logging.getLogger(__name__)


PRODUCT_VENDOR = "Product"


def _assume_valid(_: str) -> bool:
    """Formats without a checksum algorithm are reported as passing."""
    return True


class ShapeRule:
    """
    One entry of the classification table.

    Attributes:
        barcode_type: Type assigned on match
        pattern: Compiled full-match pattern
        vendor: Callable producing the vendor from the text
        checksum: Callable producing the checksum outcome from the text
    """

    def __init__(
        self,
        barcode_type: BarcodeType,
        pattern: str,
        vendor: Callable[[str], str],
        checksum: Callable[[str], bool],
        flags: int = 0
    ) -> None:
        self.barcode_type = barcode_type
        self.pattern = re.compile(pattern, flags)
        self.vendor = vendor
        self.checksum = checksum

    def matches(self, text: str) -> bool:
        """Check whether the text has this rule's shape."""
        return self.pattern.fullmatch(text) is not None

    def apply(self, text: str) -> ClassificationResult:
        """Build the result for a text this rule matched."""
        return ClassificationResult(
            text=text,
            type=self.barcode_type,
            is_valid=True,
            vendor=self.vendor(text),
            checksum_valid=self.checksum(text),
        )

    def __repr__(self) -> str:
        return f"ShapeRule({self.barcode_type.value}, {self.pattern.pattern!r})"


class BarcodeClassifier:
    """
    Classifier for decoded barcode text.

    Stateless and deterministic; a single instance can be shared between
    threads.

    Example:
        >>> classifier = BarcodeClassifier()
        >>> result = classifier.classify(" 036000291452 ")
        >>> result.type, result.checksum_valid
        (<BarcodeType.UPC_A: 'UPC-A'>, True)
    """

    RULES: Tuple[ShapeRule, ...] = (
        ShapeRule(BarcodeType.IMEI, r"[0-9]{15}", get_imei_vendor, validate_imei_checksum),
        ShapeRule(
            BarcodeType.MEID,
            r"[0-9A-F]{14}",
            lambda _: UNKNOWN_VENDOR,
            _assume_valid,
            flags=re.IGNORECASE,
        ),
        ShapeRule(BarcodeType.UPC_A, r"[0-9]{12}", lambda _: PRODUCT_VENDOR, validate_upc_a_checksum),
        ShapeRule(BarcodeType.UPC_E, r"[0-9]{8}", lambda _: PRODUCT_VENDOR, _assume_valid),
        ShapeRule(BarcodeType.EAN_13, r"[0-9]{13}", lambda _: PRODUCT_VENDOR, validate_ean13_checksum),
    )

    def classify(self, raw_text: Optional[str]) -> ClassificationResult:
        """
        Classify one decoded text.

        Never raises: unrecognized or empty input yields an Unknown,
        invalid result.

        Args:
            raw_text: Text reported by the decoder

        Returns:
            ClassificationResult for the trimmed text
        """
        text = (raw_text or "").strip()

        for rule in self.RULES:
            if rule.matches(text):
                result = rule.apply(text)
                logger.debug(
                    f"Classified {text!r} as {result.type.value} "
                    f"(checksum={'ok' if result.checksum_valid else 'bad'})"
                )
                return result

        logger.debug(f"Unrecognized barcode shape: {text!r}")
        return ClassificationResult(
            text=text,
            type=BarcodeType.UNKNOWN,
            is_valid=False,
            vendor=UNKNOWN_VENDOR,
            checksum_valid=False,
        )

    def classify_many(self, texts: List[str]) -> List[ClassificationResult]:
        """Classify a batch of texts, preserving order."""
        return [self.classify(text) for text in texts]


_default_classifier = BarcodeClassifier()


def classify(raw_text: Optional[str]) -> ClassificationResult:
    """Classify text with the shared module-level classifier."""
    return _default_classifier.classify(raw_text)
