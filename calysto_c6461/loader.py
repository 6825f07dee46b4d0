"""
Program loader: parses a load file into (address, word) records.

One record per line, `<address> <word>`, each token hexadecimal
(0x prefix), octal (digits 0-7 only, as the assembler writes them) or
decimal. Blank lines and lines starting with #, // or ; are ignored.
"""

import os
from collections import namedtuple

from .errors import C6461Error, IO, LoadFileError
from .words import parse_number

LoadRecord = namedtuple("LoadRecord", ["address", "word"])

comment_prefixes = ("#", "//", ";")

class LoadImage(object):
    def __init__(self, records):
        self.records = records
        if records:
            self.first_address = records[0].address
        else:
            self.first_address = None

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

def parse_load_text(text):
    records = []
    for line_no, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith(comment_prefixes):
            continue
        parts = line.split()
        if len(parts) < 2:
            raise LoadFileError("missing fields: %r" % line, line_no)
        values = []
        for token in parts[:2]:
            try:
                values.append(parse_number(token))
            except ValueError:
                raise LoadFileError("bad number %r" % token, line_no)
        records.append(LoadRecord(*values))
    return LoadImage(records)

def read_text(path):
    try:
        with open(path, encoding="utf-8") as fp:
            return fp.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise C6461Error("Cannot read %s: %s" % (path, getattr(exc, "strerror", None) or exc),
                         kind=IO)

def parse_load_file(path):
    return parse_load_text(read_text(path))

def sibling_listing(load_path):
    """ txt/test_load.txt -> txt/test_listing.txt """
    directory, name = os.path.split(load_path)
    stem = os.path.splitext(name)[0]
    if stem.endswith("_load"):
        stem = stem[:-len("_load")]
    return os.path.join(directory, stem + "_listing.txt")

def first_instruction(listing_text):
    """
    The LOC column of the first listing row whose mnemonic is neither
    LOC nor Data, or None.
    """
    for line in listing_text.splitlines():
        loc, source = line[:6], line[16:]
        if len(loc) != 6 or not all(c in "01234567" for c in loc):
            continue
        words = source.split(";")[0].split()
        if words and words[0].endswith(":"):
            words = words[1:]
        if words and words[0].upper() not in ("LOC", "DATA"):
            return int(loc, 8)
    return None

def start_address_hint(load_path, image):
    listing = sibling_listing(load_path)
    if os.path.isfile(listing):
        try:
            start = first_instruction(read_text(listing))
        except C6461Error:
            start = None
        if start is not None:
            return start
    return image.first_address
