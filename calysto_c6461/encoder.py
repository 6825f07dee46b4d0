"""
Basic instruction format:

    OP r, x, address[,I]
    opcode:6 | r:2 | ix:2 | I:1 | address:5

      r  - general purpose register R0-R3
      ix - index register X1-X3 (0 means no indexing)
      I  - 1 selects indirect addressing
      address - one of 32 locations
"""

from collections import namedtuple

from .errors import EncodingError
from .opcodes import lookup, mnemonic_for
from .words import to_oct6

Fields = namedtuple("Fields", ["opcode", "r", "ix", "i", "addr"])

# (name, low, high) in operand order
field_ranges = [
    ("r", 0, 3),
    ("ix", 0, 3),
    ("address", 0, 31),
    ("I", 0, 1),
]

# LDX/STX use the ix field as the target register
index_ops = ("LDX", "STX")

def pack(opcode, r, ix, i, addr):
    """ Mask each field to its width and shift it into place """
    return (((opcode & 0x3F) << 10) |
            ((r & 0b11) << 8) |
            ((ix & 0b11) << 6) |
            ((i & 0b1) << 5) |
            (addr & 0b11111))

def decode(word):
    return Fields((word & 0b1111110000000000) >> 10,
                  (word & 0b0000001100000000) >> 8,
                  (word & 0b0000000011000000) >> 6,
                  (word & 0b0000000000100000) >> 5,
                  word & 0b0000000000011111)

def encode(mnemonic, operands):
    """
    Encode `OP r, x, address[,I]` given the operands as decimal strings.
    Raises EncodingError naming the offending mnemonic or field.
    """
    opcode = lookup(mnemonic)
    if len(operands) not in (3, 4):
        raise EncodingError("Expected r,x,address[,I] for %s, got %d operand(s)" %
                            (mnemonic, len(operands)))
    values = []
    for (name, low, high), token in zip(field_ranges, operands):
        try:
            value = int(token)
        except ValueError:
            raise EncodingError('Bad %s operand for %s: "%s"' % (name, mnemonic, token))
        if not low <= value <= high:
            raise EncodingError("%s out of range for %s: %d (expected %d-%d)" %
                                (name, mnemonic, value, low, high))
        values.append(value)
    if len(values) == 3:
        values.append(0) # direct addressing
    r, ix, addr, i = values
    return pack(opcode, r, ix, i, addr)

def format_instruction(word):
    fields = decode(word)
    name = mnemonic_for(fields.opcode)
    if name is None:
        return "DATA %s" % to_oct6(word)
    if name == "HLT":
        return "HLT" if word == 0 else "HLT ; %s" % to_oct6(word)
    if name in index_ops:
        operands = [fields.ix, fields.addr]
    else:
        operands = [fields.r, fields.ix, fields.addr]
    if fields.i:
        operands.append(1)
    return "%s %s" % (name, ",".join(str(v) for v in operands))
