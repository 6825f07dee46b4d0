"""
Opcode table for the C6461 instruction set. Values are octal, as in
the ISA document.
"""

from .errors import EncodingError

OPCODES = {
    # Miscellaneous
    'HLT': 0o00,
    # Load/Store
    'LDR': 0o01,
    'STR': 0o02,
    'LDA': 0o03,
    'LDX': 0o41,
    'STX': 0o42,
    # Transfer
    'JZ':  0o10,
    'JNE': 0o11,
    'JCC': 0o12,
    'JSR': 0o14,
    'RFS': 0o15,
    'SOB': 0o16,
    'JGE': 0o17,
    # Arithmetic and logical
    'AMR': 0o04,
    'SMR': 0o05,
    'AIR': 0o06,
    'SIR': 0o07,
    'MLT': 0o70,
    'DVD': 0o71,
    'TRR': 0o72,
    'AND': 0o73,
    'ORR': 0o74,
    'NOT': 0o75,
    # Shift/Rotate
    'SRC': 0o31,
    'RRC': 0o32,
    # I/O
    'IN':  0o61,
    'OUT': 0o62,
    'CHK': 0o63,
}

MNEMONICS = dict((value, name) for name, value in OPCODES.items())

def lookup(mnemonic):
    try:
        return OPCODES[mnemonic.upper()]
    except KeyError:
        raise EncodingError('Unknown opcode: "%s"' % mnemonic)

def mnemonic_for(opcode):
    return MNEMONICS.get(opcode)
