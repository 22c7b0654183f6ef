"""
==============================================================================
Checksum Validator Tests
==============================================================================

Tests for the IMEI Luhn check and the GS1 check used by UPC-A and EAN-13.

==============================================================================
"""

import pytest

from imei_scanner.barcodes.checksums import (
    gs1_check_digit,
    luhn_check_digit,
    validate_ean13_checksum,
    validate_imei_checksum,
    validate_upc_a_checksum,
)


class TestImeiChecksum:
    """Tests for the Luhn IMEI check."""

    @pytest.mark.parametrize("imei", [
        "490154203237518",
        "356938035643809",
        "012345678901237",
    ])
    def test_valid_imeis(self, imei: str):
        """Test known-good IMEIs pass."""
        assert validate_imei_checksum(imei) is True

    @pytest.mark.parametrize("imei", [
        "490154203237510",
        "356938035643800",
        "012345678901234",
    ])
    def test_wrong_check_digit(self, imei: str):
        """Test a wrong final digit fails."""
        assert validate_imei_checksum(imei) is False

    def test_luhn_check_digit(self):
        """Test the check digit of a known IMEI body."""
        body = [int(c) for c in "49015420323751"]
        assert luhn_check_digit(body) == 8

    def test_all_zero_imei(self):
        """Test all zeros is a valid Luhn string."""
        assert validate_imei_checksum("000000000000000") is True

    @pytest.mark.parametrize("value", [
        "",
        "49015420323751",
        "4901542032375180",
        "49015420323751X",
        " 490154203237518",
    ])
    def test_rejects_wrong_shape(self, value: str):
        """Test inputs that are not 15 digits raise ValueError."""
        with pytest.raises(ValueError):
            validate_imei_checksum(value)

    def test_rejects_non_ascii_digits(self):
        """Test Unicode digits are not accepted as IMEI digits."""
        with pytest.raises(ValueError):
            validate_imei_checksum("٤٩٠١٥٤٢٠٣٢٣٧٥١٨")


class TestGs1Checksum:
    """Tests for UPC-A and EAN-13 check digits."""

    def test_gs1_check_digit_upc_body(self):
        """Test the check digit of a known UPC-A body."""
        assert gs1_check_digit([0, 3, 6, 0, 0, 0, 2, 9, 1, 4, 5]) == 2

    def test_valid_upc_a(self):
        """Test a retail UPC-A passes."""
        assert validate_upc_a_checksum("036000291452") is True

    def test_invalid_upc_a(self):
        """Test a wrong UPC-A check digit fails."""
        assert validate_upc_a_checksum("036000291453") is False

    def test_valid_ean13(self):
        """Test a retail EAN-13 passes."""
        assert validate_ean13_checksum("4006381333931") is True

    def test_invalid_ean13(self):
        """Test a wrong EAN-13 check digit fails."""
        assert validate_ean13_checksum("4006381333932") is False

    def test_upc_a_as_ean13_agrees(self):
        """Test a UPC-A with a leading zero keeps its check digit as EAN-13."""
        assert validate_ean13_checksum("0036000291452") is True

    @pytest.mark.parametrize("validator, value", [
        (validate_upc_a_checksum, "03600029145"),
        (validate_upc_a_checksum, "03600029145A"),
        (validate_ean13_checksum, "400638133393"),
        (validate_ean13_checksum, "40063813339311"),
    ])
    def test_rejects_wrong_shape(self, validator, value: str):
        """Test inputs of the wrong length or alphabet raise ValueError."""
        with pytest.raises(ValueError):
            validator(value)
