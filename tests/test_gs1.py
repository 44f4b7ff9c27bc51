import pytest

from ship_calc.gs1 import (
    BarcodeError,
    calculate_upc_check_digit,
    format_gtin14_for_display,
    format_upc_for_display,
    generate_gtin14_from_upc,
    generate_sscc,
    generate_upc_code,
    identify_code,
    validate_gtin14,
    validate_sscc,
    validate_upc_code,
)


def test_known_upc_check_digit():
    assert calculate_upc_check_digit("03600029145") == 2
    assert calculate_upc_check_digit("0-36000-29145") == 2


def test_check_digit_requires_eleven_digits():
    with pytest.raises(BarcodeError):
        calculate_upc_check_digit("123")
    with pytest.raises(BarcodeError):
        calculate_upc_check_digit("036000291452")


def test_check_digit_completes_a_valid_upc():
    for data in ["00000000000", "99999999999", "12345678901", "07012345678"]:
        digit = calculate_upc_check_digit(data)
        assert 0 <= digit <= 9
        assert validate_upc_code(data + str(digit))


def test_generate_upc_code():
    assert generate_upc_code("012345", "00001") == "012345000014"
    assert generate_upc_code("012345", 1) == "012345000014"
    assert validate_upc_code(generate_upc_code("0123456789", 7))


def test_generate_upc_code_keeps_low_order_item_digits():
    code = generate_upc_code("0123456789", "123")
    assert code[:11] == "01234567893"


def test_generate_upc_code_rejects_bad_prefix():
    with pytest.raises(BarcodeError):
        generate_upc_code("12345", 1)
    with pytest.raises(BarcodeError):
        generate_upc_code("01234567890", 1)


def test_validate_upc_code():
    assert validate_upc_code("036000291452")
    assert validate_upc_code("0 36000 29145 2")
    assert not validate_upc_code("036000291453")
    assert not validate_upc_code("03600029145")
    assert not validate_upc_code(None)
    assert not validate_upc_code("")


def test_gtin14_from_upc():
    assert generate_gtin14_from_upc("036000291452") == "10036000291459"
    assert generate_gtin14_from_upc("036000291452", 0) == "00036000291452"


def test_gtin14_roundtrip_for_every_indicator():
    for indicator in "012345678":
        assert validate_gtin14(generate_gtin14_from_upc("012345000014", indicator))


def test_gtin14_rejects_bad_input():
    with pytest.raises(BarcodeError):
        generate_gtin14_from_upc("03600029145")
    with pytest.raises(BarcodeError):
        generate_gtin14_from_upc("036000291452", "9")
    with pytest.raises(BarcodeError):
        generate_gtin14_from_upc("036000291452", "10")


def test_validate_gtin14():
    assert validate_gtin14("10036000291459")
    assert not validate_gtin14("10036000291458")
    assert not validate_gtin14("036000291452")


def test_generate_sscc():
    assert generate_sscc("0614141", "123456789", "1") == "106141411234567897"
    code = generate_sscc("0614141", 42)
    assert len(code) == 18
    assert code.startswith("00614141000000042")
    assert validate_sscc(code)


def test_sscc_rejects_bad_parts():
    with pytest.raises(BarcodeError):
        generate_sscc("0123456789", "1234567")
    with pytest.raises(BarcodeError):
        generate_sscc("0614141", 1, "x")
    with pytest.raises(BarcodeError):
        generate_sscc("0614", 1)


def test_display_formats():
    assert format_upc_for_display("036000291452") == "0-36000-29145-2"
    assert format_upc_for_display("12345") == "12345"
    assert format_gtin14_for_display("10036000291459") == "(1) 00-36000-29145-9"
    assert format_gtin14_for_display("036000291452") == "036000291452"


def test_identify_code():
    assert identify_code("036000291452") == ("UPC-A", True)
    assert identify_code("10036000291458") == ("GTIN-14", False)
    assert identify_code("106141411234567897") == ("SSCC-18", True)
    assert identify_code("1234") == (None, False)


def test_only_ascii_digits_count():
    assert not validate_upc_code("٠٣٦٠٠٠٢٩١٤٥٢")
    assert identify_code("٠٣٦٠٠٠٢٩١٤٥٢") == (None, False)
    with pytest.raises(BarcodeError):
        generate_upc_code("٠١٢٣٤٥", 1)
    with pytest.raises(BarcodeError):
        generate_sscc("0614141", 1, "٣")
