"""
Two-pass assembler for the C6461.

Reads .asm source (numbers are DECIMAL) and produces:
  - a listing (LOC/WORD columns in octal, followed by the source)
  - a load image (LOC WORD pairs in octal)

PASS 1 parses each line, defines labels at the location counter and
assigns an address to every Data/instruction line. PASS 2 computes
each word and feeds the listing and load writers.
"""

import os

from .encoder import encode, index_ops
from .errors import AssemblyError, C6461Error, IO
from .listing import ListingWriter, LoadWriter
from .words import is_decimal_literal, mask, to_oct6

MEMORY_SIZE = 2048

class SourceLine(object):
    """
    One line of source after tokenizing. Pass 1 fills in address,
    allocates and is_loc.
    """
    def __init__(self, line_no, text, label=None, op=None, operands=None,
                 comment=None):
        self.line_no = line_no
        self.text = text
        self.label = label
        self.op = op
        self.operands = operands or []
        self.comment = comment
        self.address = None
        self.word = None
        self.allocates = False
        self.is_loc = False

    def source(self):
        """ Rebuild the listing source column: `label: op a,b,c ;comment` """
        s = ""
        if self.label is not None:
            s += self.label + ": "
        s += self.op
        if self.operands:
            s += " " + ",".join(self.operands)
        if self.comment:
            s += " ;" + self.comment
        return s

    def __repr__(self):
        return "<SourceLine %d %r>" % (self.line_no, self.text)

def tokenize(line_no, text):
    """
    Split a raw line into label, op, operands and comment.
    ';' starts a comment, a first token ending in ':' is a label,
    and operands are separated by commas.
    """
    comment = None
    code = text
    if ";" in text:
        code, comment = text.split(";", 1)
        comment = comment.strip()
    words = code.split()
    if not words:
        return SourceLine(line_no, text, comment=comment)
    label = None
    if words[0].endswith(":"):
        label = words.pop(0)[:-1]
    if not words:
        # label-only line
        return SourceLine(line_no, text, label=label, comment=comment)
    op = words[0]
    operands = [piece.strip() for piece in " ".join(words[1:]).split(",")]
    operands = [piece for piece in operands if piece]
    return SourceLine(line_no, text, label, op, operands, comment)

class SymbolTable(object):
    """ Label -> decimal address. Each label is defined exactly once. """
    def __init__(self):
        self.symbols = {}

    def define(self, label, address, line_no=None):
        if label in self.symbols:
            raise AssemblyError("Duplicate label '%s'" % label, line_no)
        self.symbols[label] = address

    def lookup(self, label, line_no=None):
        try:
            return self.symbols[label]
        except KeyError:
            raise AssemblyError("Unknown label '%s'" % label, line_no)

    def __contains__(self, label):
        return label in self.symbols

    def __len__(self):
        return len(self.symbols)

    def items(self):
        return self.symbols.items()

class Assembly(object):
    """ Everything one assembly produced. """
    def __init__(self, lines, symbols, listing, load):
        self.lines = lines
        self.symbols = symbols
        self.listing = listing
        self.load = load
        self.records = [(line.address, line.word) for line in lines
                        if line.allocates]
        if self.records:
            self.first_address = self.records[0][0]
        else:
            self.first_address = None
        # the first instruction, skipping Data words
        self.start_address = self.first_address
        for line in lines:
            if line.allocates and line.op.upper() != "DATA":
                self.start_address = line.address
                break

    def listing_text(self):
        return self.listing.text()

    def load_text(self):
        return self.load.text()

class Assembler(object):
    def __init__(self):
        self.symbols = SymbolTable()
        self.lines = []

    def resolve(self, token, line_no):
        """ A decimal literal, or the address of a label """
        if is_decimal_literal(token):
            return int(token)
        return self.symbols.lookup(token, line_no)

    def pass1(self, text):
        self.symbols = SymbolTable()
        self.lines = []
        lc = 0
        for line_no, raw in enumerate(text.splitlines(), 1):
            line = tokenize(line_no, raw)
            self.lines.append(line)
            if line.op is None:
                continue
            if line.label is not None:
                self.symbols.define(line.label, lc, line_no)
            if line.op.upper() == "LOC":
                line.is_loc = True
                if len(line.operands) != 1:
                    raise AssemblyError("LOC expects 1 operand, got %d" %
                                        len(line.operands), line_no)
                # labels used by LOC must already be defined
                lc = self.resolve(line.operands[0], line_no)
                if lc < 0:
                    raise AssemblyError("LOC address must not be negative: %d" % lc,
                                        line_no)
                continue
            if lc >= MEMORY_SIZE:
                raise AssemblyError("Address %d beyond memory (%d words)" %
                                    (lc, MEMORY_SIZE), line_no)
            line.allocates = True
            line.address = lc
            lc += 1
        return self.lines

    def pass2(self, listing=None, load=None):
        listing = listing if listing is not None else ListingWriter()
        load = load if load is not None else LoadWriter()
        for line in self.lines:
            if line.op is None:
                listing.write_raw(line.text)
            elif not line.allocates:
                listing.write_line("", "", line.source())
            else:
                try:
                    line.word = mask(self.compute_word(line))
                except C6461Error as exc:
                    if exc.line_no is None:
                        exc.line_no = line.line_no
                    raise
                loc = to_oct6(line.address)
                word = to_oct6(line.word)
                listing.write_line(loc, word, line.source())
                load.write_word(loc, word)
        return listing, load

    def compute_word(self, line):
        op = line.op.upper()
        if op == "DATA":
            if len(line.operands) != 1:
                raise AssemblyError("Data expects 1 operand, got %d" %
                                    len(line.operands), line.line_no)
            return self.resolve(line.operands[0], line.line_no)
        if op == "HLT":
            # HLT has no operands; the whole word is zero
            return 0
        operands = [str(self.resolve(token, line.line_no))
                    for token in line.operands]
        if op in index_ops:
            if len(operands) not in (2, 3):
                raise AssemblyError("%s expects x,address[,I]" % op, line.line_no)
            operands = ["0"] + operands
        return encode(line.op, operands)

    def assemble_text(self, text):
        self.pass1(text)
        listing, load = self.pass2()
        return Assembly(self.lines, self.symbols, listing, load)

def output_paths(source_path, out_dir="txt"):
    stem = os.path.splitext(os.path.basename(source_path))[0]
    return (os.path.join(out_dir, stem + "_listing.txt"),
            os.path.join(out_dir, stem + "_load.txt"))

def assemble_file(source_path, out_dir="txt"):
    """
    Assemble source_path and write <stem>_listing.txt and <stem>_load.txt
    into out_dir. Returns (assembly, listing_path, load_path).
    """
    try:
        with open(source_path, encoding="utf-8") as fp:
            text = fp.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise C6461Error("Cannot read %s: %s" % (source_path,
                                                 getattr(exc, "strerror", None) or exc),
                         kind=IO)
    assembly = Assembler().assemble_text(text)
    listing_path, load_path = output_paths(source_path, out_dir)
    written = []
    try:
        os.makedirs(out_dir, exist_ok=True)
        for path, contents in ((listing_path, assembly.listing_text()),
                               (load_path, assembly.load_text())):
            written.append(path)
            with open(path, "w", encoding="utf-8") as fp:
                fp.write(contents)
    except OSError as exc:
        for path in written:
            if os.path.exists(path):
                os.remove(path)
        raise C6461Error("Cannot write %s: %s" % (written[-1] if written else out_dir,
                                                  exc.strerror or exc), kind=IO)
    return assembly, listing_path, load_path
