"""
The C6461 machine: memory, register file, and a single-step CPU.

Every operator command (ipl, step, reset, load, load+, store, store+,
set, ...) returns a Status record; faults and bad input are reported
through it rather than raised.
"""

import functools
from array import array

from .encoder import decode, format_instruction
from .errors import (C6461Error, CommandError, LoadFileError, MachineFault,
                     Status, COMMAND)
from .loader import parse_load_file, start_address_hint
from .opcodes import mnemonic_for
from .words import WORD_MASK, parse_number, to_oct6

MEMORY_SIZE = 2048
ADDRESS_MASK = 0xFFF # PC and MAR are 12 bits
NIBBLE_MASK = 0xF

READY = "Ready"
HALTED = "Halted"
FAULTED = "Faulted"

# Machine fault codes kept in MFR
FAULT_ILLEGAL_OPCODE = 0b0100
FAULT_ADDRESS_RANGE = 0b1000

class IllegalOperation(MachineFault):
    """ An instruction that cannot execute, e.g. LDX into X0 """

class Memory(object):
    """ 2048 16-bit words, zero on power-on and reset. """
    def __init__(self, size=MEMORY_SIZE):
        self.size = size
        self.words = array('H', [0] * size)

    def clear(self):
        for i in range(self.size):
            self.words[i] = 0

    def check(self, address):
        if not 0 <= address < self.size:
            raise MachineFault("Memory address out of range: %s (valid 0..%d)" %
                               (address, self.size - 1))

    def read(self, address):
        self.check(address)
        return self.words[address]

    def write(self, address, word):
        self.check(address)
        self.words[address] = word & WORD_MASK

class Registers(object):
    """
    Architectural registers. Values are masked to their width on store:
        R0-R3, X1-X3, MBR, IR  - 16 bits
        PC, MAR                - 12 bits
        CC, MFR                - 4 bits
    """
    def __init__(self):
        self.clear()

    def clear(self):
        self.gpr = [0, 0, 0, 0]
        self.ixr = [0, 0, 0, 0] # index 0 unused
        self._pc = self._mar = self._mbr = self._ir = 0
        self._cc = self._mfr = 0

    def get_gpr(self, r):
        if not 0 <= r <= 3:
            raise CommandError("GPR index out of range: %s" % r)
        return self.gpr[r]

    def set_gpr(self, r, value):
        if not 0 <= r <= 3:
            raise CommandError("GPR index out of range: %s" % r)
        self.gpr[r] = value & WORD_MASK

    def get_index(self, x):
        if not 1 <= x <= 3:
            raise CommandError("IXR index out of range: %s" % x)
        return self.ixr[x]

    def set_index(self, x, value):
        if not 1 <= x <= 3:
            raise CommandError("IXR index out of range: %s" % x)
        self.ixr[x] = value & WORD_MASK

    def _get_pc(self):
        return self._pc

    def _set_pc(self, value):
        self._pc = value & ADDRESS_MASK

    pc = property(_get_pc, _set_pc)

    def _get_mar(self):
        return self._mar

    def _set_mar(self, value):
        self._mar = value & ADDRESS_MASK

    mar = property(_get_mar, _set_mar)

    def _get_mbr(self):
        return self._mbr

    def _set_mbr(self, value):
        self._mbr = value & WORD_MASK

    mbr = property(_get_mbr, _set_mbr)

    def _get_ir(self):
        return self._ir

    def _set_ir(self, value):
        self._ir = value & WORD_MASK

    ir = property(_get_ir, _set_ir)

    def _get_cc(self):
        return self._cc

    def _set_cc(self, value):
        self._cc = value & NIBBLE_MASK

    cc = property(_get_cc, _set_cc)

    def _get_mfr(self):
        return self._mfr

    def _set_mfr(self, value):
        self._mfr = value & NIBBLE_MASK

    mfr = property(_get_mfr, _set_mfr)

    def snapshot(self):
        values = dict(("R%d" % r, self.gpr[r]) for r in range(4))
        values.update(("X%d" % x, self.ixr[x]) for x in range(1, 4))
        values.update(PC=self.pc, MAR=self.mar, MBR=self.mbr, IR=self.ir,
                      CC=self.cc, MFR=self.mfr)
        return values

def command(name):
    """ Turn errors raised by an operator command into a failed Status """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                return method(self, *args, **kwargs)
            except (C6461Error, OSError) as exc:
                return Status.failure(name, exc)
        return wrapper
    return decorator

class Machine(object):
    """
    Memory, registers and CPU state owned as one unit. Not thread-safe:
    callers serialize commands.
    """
    def __init__(self, kernel=None):
        self.kernel = kernel
        self.debug = False
        self.max_steps = 10000
        self.filename = ""
        self.memory = Memory()
        self.registers = Registers()
        self.state = READY
        self.instruction_count = 0
        # Functions for executing instructions, by opcode:
        self.apply = {
            0o00: self.HLT,
            0o01: self.LDR,
            0o03: self.LDA,
            0o10: self.JZ,
            0o41: self.LDX,
        }
        # Operator commands: name -> (method, min args, max args)
        self.commands = {
            "ipl": (self.ipl, 1, 1),
            "step": (self.step, 0, 0),
            "run": (self.run, 0, 1),
            "reset": (self.reset, 0, 0),
            "load": (self.load, 0, 0),
            "load+": (self.load_plus, 0, 0),
            "store": (self.store, 0, 0),
            "store+": (self.store_plus, 0, 0),
            "set": (self.set, 2, 2),
            "regs": (self.regs, 0, 0),
            "dump": (self.dump, 0, 2),
            "debug": (self.toggle_debug, 0, 0),
        }
        self.setters = {
            "PC": self.set_pc,
            "MAR": self.set_mar,
            "MBR": self.set_mbr,
        }
        for r in range(4):
            self.setters["R%d" % r] = functools.partial(self.set_gpr, r)
        for x in range(1, 4):
            self.setters["X%d" % x] = functools.partial(self.set_index, x)

    @property
    def halted(self):
        return self.state != READY

    def Print(self, *args, **kwargs):
        if self.kernel:
            self.kernel.Print(*args, **kwargs)
        else:
            print(*args, **kwargs)

    #### Traced register and memory access

    def set_gpr(self, r, value):
        self.registers.set_gpr(r, value)
        if self.debug:
            self.Print("    R%d <= %s" % (r, to_oct6(self.registers.get_gpr(r))))

    def set_index(self, x, value):
        self.registers.set_index(x, value)
        if self.debug:
            self.Print("    X%d <= %s" % (x, to_oct6(self.registers.get_index(x))))

    def set_pc(self, value):
        self.registers.pc = value
        if self.debug:
            self.Print("    PC <= %s" % to_oct6(self.registers.pc))

    def set_mar(self, value):
        self.registers.mar = value
        if self.debug:
            self.Print("    MAR <= %s" % to_oct6(self.registers.mar))

    def set_mbr(self, value):
        self.registers.mbr = value
        if self.debug:
            self.Print("    MBR <= %s" % to_oct6(self.registers.mbr))

    def get_memory(self, address):
        return self.memory.read(address)

    def set_memory(self, address, value):
        self.memory.write(address, value)
        if self.debug:
            self.Print("    memory[%s] <= %s" % (to_oct6(address),
                                                 to_oct6(self.memory.words[address])))

    #### State

    def clear(self):
        self.memory.clear()
        self.registers.clear()
        self.state = READY
        self.instruction_count = 0

    def fault(self, exc, code, **details):
        self.state = FAULTED
        self.registers.mfr = code
        details["state"] = self.state
        return Status.failure("step", exc, **details)

    #### CPU

    def effective_address(self, fields, indexed=True):
        """
        EA = address [+ X[ix]], then MEM[EA] when I=1. LDX/STX name
        their target register in ix, so they are not indexed.
        """
        ea = fields.addr
        if indexed and fields.ix != 0:
            ea += self.registers.get_index(fields.ix)
        ea &= ADDRESS_MASK
        if fields.i:
            ea = self.get_memory(ea) & ADDRESS_MASK
        if not 0 <= ea < MEMORY_SIZE:
            raise MachineFault("EA out of range: %d" % ea)
        return ea

    @command("step")
    def step(self):
        if self.halted:
            return Status("step", message="halted", state=self.state)
        # FETCH
        pc = self.registers.pc
        self.set_mar(pc)
        try:
            instruction = self.get_memory(self.registers.mar)
        except MachineFault:
            return self.fault(MachineFault("Fetch address out of range: %d" % pc),
                              FAULT_ADDRESS_RANGE, pc=pc)
        self.set_mbr(instruction)
        self.registers.ir = instruction
        self.set_pc(pc + 1)
        self.instruction_count += 1
        # DECODE
        fields = decode(self.registers.ir)
        name = mnemonic_for(fields.opcode)
        if self.debug:
            self.Print("(%s) %s: %s  %s (PC*: %s)" % (
                self.instruction_count, to_oct6(pc), to_oct6(instruction),
                format_instruction(instruction), to_oct6(self.registers.pc)))
        # EXECUTE
        execute = self.apply.get(fields.opcode)
        if execute is None:
            return self.fault(MachineFault("Unsupported opcode %s (IR=%s)" %
                                           (name or "%02o" % fields.opcode,
                                            to_oct6(instruction))),
                              FAULT_ILLEGAL_OPCODE, pc=pc, opcode=name, ir=instruction)
        try:
            details = execute(fields)
        except MachineFault as exc:
            if isinstance(exc, IllegalOperation):
                code = FAULT_ILLEGAL_OPCODE
            else:
                code = FAULT_ADDRESS_RANGE
            return self.fault(exc, code, pc=pc, opcode=name, ir=instruction)
        details.setdefault("ea", None)
        details.setdefault("touched", [])
        return Status("step", message=details.pop("message"), pc=pc,
                      opcode=name, ir=instruction, state=self.state, **details)

    def HLT(self, fields):
        self.state = HALTED
        return dict(message="HLT")

    def LDR(self, fields):
        ea = self.effective_address(fields)
        value = self.get_memory(ea)
        self.set_gpr(fields.r, value)
        return dict(message="LDR R%d <- MEM[%s] = %s" % (fields.r, to_oct6(ea), to_oct6(value)),
                    ea=ea, touched=["R%d" % fields.r])

    def LDA(self, fields):
        ea = self.effective_address(fields)
        self.set_gpr(fields.r, ea)
        return dict(message="LDA R%d <- %s" % (fields.r, to_oct6(ea)),
                    ea=ea, touched=["R%d" % fields.r])

    def JZ(self, fields):
        ea = self.effective_address(fields)
        if self.registers.get_gpr(fields.r) == 0:
            self.set_pc(ea)
            return dict(message="JZ taken, PC <- %s" % to_oct6(ea),
                        ea=ea, touched=["PC"])
        return dict(message="JZ not taken (R%d != 0)" % fields.r, ea=ea)

    def LDX(self, fields):
        x = fields.ix
        if x == 0:
            raise IllegalOperation("LDX with X=0 is invalid")
        ea = self.effective_address(fields, indexed=False)
        value = self.get_memory(ea)
        self.set_index(x, value)
        return dict(message="LDX X%d <- MEM[%s] = %s" % (x, to_oct6(ea), to_oct6(value)),
                    ea=ea, touched=["X%d" % x])

    @command("run")
    def run(self, max_steps=None):
        if max_steps is None:
            max_steps = self.max_steps
        elif not isinstance(max_steps, int):
            try:
                max_steps = int(max_steps)
            except ValueError:
                raise CommandError('Bad step count: "%s"' % max_steps)
        count = 0
        status = Status("run", message="halted", state=self.state)
        while not self.halted and count < max_steps:
            status = self.step()
            count += 1
        if not status.ok:
            status.command = "run"
            status.details["steps"] = count
            return status
        if self.halted:
            message = "Computation completed" if self.state == HALTED else status.message
        else:
            message = "Computation SUSPENDED after %d step(s)" % count
        return Status("run", message=message, steps=count, state=self.state)

    #### Operator commands

    @command("reset")
    def reset(self):
        self.clear()
        return Status("reset", message="Memory and registers cleared", state=self.state)

    @command("ipl")
    def ipl(self, path):
        self.clear()
        image = parse_load_file(path)
        self.filename = path
        return self.ipl_image(image, start_address_hint(path, image))

    @command("ipl")
    def ipl_image(self, image, start=None):
        self.clear()
        for address, word in image:
            if not 0 <= address < MEMORY_SIZE:
                raise LoadFileError("Load address out of range: %d" % address)
        for address, word in image:
            self.memory.write(address, word)
        if start is None:
            start = image.first_address if image.first_address is not None else 0
        self.set_pc(start)
        self.set_mar(start)
        return Status("ipl", message="Loaded %d word(s); PC <- %s" %
                      (len(image), to_oct6(start)),
                      records=len(image), first_address=image.first_address,
                      start=start, state=self.state)

    @command("load")
    def load(self):
        self.set_mbr(self.get_memory(self.registers.mar))
        return Status("load", message="MBR <- MEM[%s] = %s" %
                      (to_oct6(self.registers.mar), to_oct6(self.registers.mbr)),
                      touched=["MBR"])

    @command("load+")
    def load_plus(self):
        status = self.load()
        if status.ok:
            self.set_mar(self.registers.mar + 1)
            status.command = "load+"
            status.details["touched"] = ["MBR", "MAR"]
        return status

    @command("store")
    def store(self):
        self.set_memory(self.registers.mar, self.registers.mbr)
        return Status("store", message="MEM[%s] <- %s" %
                      (to_oct6(self.registers.mar), to_oct6(self.registers.mbr)))

    @command("store+")
    def store_plus(self):
        status = self.store()
        if status.ok:
            self.set_mar(self.registers.mar + 1)
            status.command = "store+"
            status.details["touched"] = ["MAR"]
        return status

    @command("set")
    def set(self, target, value):
        name = target.upper()
        if name not in self.setters:
            raise CommandError('Unknown register "%s"; use PC, MAR, MBR, R0-R3 or X1-X3' % target)
        if not isinstance(value, int):
            value = parse_value(value)
        self.setters[name](value)
        return Status("set", message="%s <- %s" % (name, to_oct6(self.registers.snapshot()[name])),
                      touched=[name])

    @command("regs")
    def regs(self):
        return Status("regs", message=self.dump_registers(),
                      registers=self.registers.snapshot(), state=self.state)

    @command("dump")
    def dump(self, start=None, stop=None):
        if start is None:
            start = self.registers.pc
        elif not isinstance(start, int):
            start = parse_value(start)
        if stop is None:
            stop = start + 9
        elif not isinstance(stop, int):
            stop = parse_value(stop)
        if stop < start:
            stop = start + 9
        stop = min(stop, start + 99, MEMORY_SIZE - 1)
        self.memory.check(start)
        lines = []
        for address in range(start, stop + 1):
            word = self.memory.read(address)
            lines.append("%s: %s  %s" % (to_oct6(address), to_oct6(word),
                                         format_instruction(word)))
        return Status("dump", message="\n".join(lines))

    @command("debug")
    def toggle_debug(self):
        self.debug = not self.debug
        return Status("debug", message="Debug is now %s" % ["off", "on"][int(self.debug)])

    def dump_registers(self):
        values = self.registers.snapshot()
        lines = ["State: %s" % self.state,
                 "PC: %s  MAR: %s  MBR: %s  IR: %s  CC: %s  MFR: %s" % tuple(
                     to_oct6(values[name]) for name in ("PC", "MAR", "MBR", "IR", "CC", "MFR")),
                 "  ".join("R%d: %s" % (r, to_oct6(values["R%d" % r])) for r in range(4)),
                 "  ".join("X%d: %s" % (x, to_oct6(values["X%d" % x])) for x in range(1, 4))]
        return "\n".join(lines)

    def execute(self, text):
        """ Dispatch one operator command line, e.g. `set R1 000017` """
        words = text.split()
        if not words:
            return Status("", ok=False, kind=COMMAND, message="Empty command")
        name = words[0].lower()
        if name not in self.commands:
            return Status(name, ok=False, kind=COMMAND,
                          message='Unknown command: "%s"' % words[0])
        method, low, high = self.commands[name]
        args = words[1:]
        if name == "ipl" and args:
            # paths may contain spaces
            args = [text.split(None, 1)[1].strip()]
        if not low <= len(args) <= high:
            return Status(name, ok=False, kind=COMMAND,
                          message="%s expects %d to %d argument(s), got %d" %
                          (name, low, high, len(args)))
        return method(*args)

def parse_value(token):
    try:
        return parse_number(token)
    except ValueError:
        raise CommandError('Bad number: "%s"' % token)
