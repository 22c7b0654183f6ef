"""
IMEI/UPC scan intake service.

Classifies decoded barcode text (IMEI, MEID, UPC-A, UPC-E, EAN-13),
blocks duplicates within a scan log and exports or syncs the results.
"""

__version__ = "1.0.0"
