"""
==============================================================================
Scanner Package - Barcode Detection
==============================================================================

Frame decoding with OpenCV and pyzbar.

Classes:
--------
- BarcodeDecoder: Converts frames and images into Detections

==============================================================================
"""

from .core import BarcodeDecoder, normalize_symbology

__all__ = ["BarcodeDecoder", "normalize_symbology"]
