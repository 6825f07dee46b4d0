"""
Word-level helpers shared by the assembler, loader and machine.

Source programs use DECIMAL numbers; listing and load files use
six-digit OCTAL columns.
"""

import re

WORD_BITS = 16
WORD_MASK = 0xFFFF

_decimal = re.compile(r"^-?\d+$")
_octal = re.compile(r"^[0-7]+$")

def mask(value, bits=WORD_BITS):
    """ Truncate value to its low bits """
    return value & ((1 << bits) - 1)

def to_oct6(value):
    """
    Format value as a six-digit zero-padded octal string. Values too
    wide for six digits keep their low six digits.
    """
    s = "%06o" % (value & 0o777777)
    return s[-6:]

def is_decimal_literal(token):
    return token is not None and _decimal.match(token) is not None

def parse_number(token):
    """
    Parse a load-file or console token:
        0x1F / 0X1F  -> hexadecimal
        001777       -> octal (only digits 0-7)
        1899         -> decimal
    """
    t = token.strip()
    if t[:2] in ("0x", "0X"):
        return int(t[2:], 16)
    if _octal.match(t):
        return int(t, 8)
    return int(t, 10)
