"""
Writers for the assembler outputs.

Listing file:

    LOC(octal)  WORD(octal)  source ;comment

Load file:

    LOC(octal) WORD(octal)

Both accumulate lines in memory; nothing reaches disk until the
assembly has finished.
"""

class ListingWriter(object):
    def __init__(self):
        self.lines = []

    def write_line(self, loc, word, source):
        # LOC directives pass blank columns
        self.lines.append("%-6s  %-6s  %s" % (loc, word, source))

    def write_raw(self, raw):
        self.lines.append(raw)

    def text(self):
        return "".join(line + "\n" for line in self.lines)

class LoadWriter(object):
    def __init__(self):
        self.lines = []

    def write_word(self, loc, word):
        self.lines.append("%s %s" % (loc, word))

    def text(self):
        return "".join(line + "\n" for line in self.lines)
