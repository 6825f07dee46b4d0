"""
Error kinds and the status record returned by every operator command.
"""

LEXICAL = "lexical"
ENCODING = "encoding"
IO = "io"
LOAD_FILE = "load-file"
RUNTIME = "runtime"
COMMAND = "command"

class C6461Error(ValueError):
    kind = None

    def __init__(self, message, line_no=None, kind=None):
        super(C6461Error, self).__init__(message)
        self.message = message
        self.line_no = line_no
        if kind is not None:
            self.kind = kind

    def __str__(self):
        if self.line_no is not None:
            return "line %s: %s" % (self.line_no, self.message)
        return self.message

class AssemblyError(C6461Error):
    kind = LEXICAL

class EncodingError(C6461Error):
    kind = ENCODING

class LoadFileError(C6461Error):
    kind = LOAD_FILE

class MachineFault(C6461Error):
    kind = RUNTIME

class CommandError(C6461Error):
    kind = COMMAND

class Status(object):
    """
    Outcome of one operator command. Faults and errors are carried in
    `kind` and `message`; `details` holds command specific values such
    as the opcode name, EA, or the registers touched by a step.
    """
    def __init__(self, command, ok=True, message="", kind=None, **details):
        self.command = command
        self.ok = ok
        self.message = message
        self.kind = kind
        self.details = details

    @classmethod
    def failure(cls, command, exc, **details):
        kind = getattr(exc, "kind", None) or IO
        return cls(command, ok=False, message=str(exc), kind=kind, **details)

    def get(self, key, default=None):
        return self.details.get(key, default)

    def __repr__(self):
        if self.ok:
            return "<Status %s ok: %s>" % (self.command, self.message)
        return "<Status %s %s: %s>" % (self.command, self.kind, self.message)
