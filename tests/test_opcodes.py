import pytest

from calysto_c6461.errors import EncodingError
from calysto_c6461.opcodes import MNEMONICS, OPCODES, lookup, mnemonic_for

def test_lookup_is_case_insensitive():
    assert lookup("ldr") == 0o01
    assert lookup("Ldx") == 0o41

def test_io_opcodes_do_not_collide_with_shifts():
    assert lookup("IN") == 0o61
    assert lookup("OUT") == 0o62
    assert lookup("CHK") == 0o63
    assert lookup("SRC") == 0o31

def test_table_is_one_to_one():
    assert len(MNEMONICS) == len(OPCODES)

def test_unknown_mnemonic():
    with pytest.raises(EncodingError) as info:
        lookup("FOO")
    assert "FOO" in str(info.value)

def test_mnemonic_for():
    assert mnemonic_for(0o41) == "LDX"
    assert mnemonic_for(0o10) == "JZ"
    assert mnemonic_for(0o77) is None
