import pytest

from calysto_c6461.words import is_decimal_literal, mask, parse_number, to_oct6

def test_to_oct6_pads_to_six_digits():
    assert to_oct6(0) == "000000"
    assert to_oct6(10) == "000012"
    assert to_oct6(0xFFFF) == "177777"

def test_to_oct6_keeps_low_six_digits():
    assert to_oct6(0o1234567) == "234567"

def test_mask():
    assert mask(0x12345) == 0x2345
    assert mask(-1) == 0xFFFF
    assert mask(0x1FFF, 12) == 0xFFF

@pytest.mark.parametrize("token, expected", [
    ("-5", True),
    ("10", True),
    ("End", False),
    ("1a", False),
    ("", False),
])
def test_is_decimal_literal(token, expected):
    assert is_decimal_literal(token) is expected

@pytest.mark.parametrize("token, value", [
    ("0x1F", 31),
    ("0X10", 16),
    ("000012", 10),
    ("12", 10),
    ("1899", 1899),
    (" 002606 ", 0o2606),
])
def test_parse_number(token, value):
    assert parse_number(token) == value

def test_parse_number_rejects_garbage():
    with pytest.raises(ValueError):
        parse_number("zz")
