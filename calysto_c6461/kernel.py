from metakernel import MetaKernel

from .assembler import Assembler
from .errors import C6461Error
from .loader import LoadImage, LoadRecord
from .machine import Machine
from .opcodes import OPCODES

class CalystoC6461(MetaKernel):
    implementation = 'C6461'
    implementation_version = '1.0'
    language = 'Calysto C6461'
    language_version = '0.1'
    banner = "Calysto C6461 - assembler and operator console for the C6461"
    language_info = {
        'name': 'gas',
        'mimetype': 'text/x-gas',
        'file_extension': '.asm',
    }

    command_help = {
        "ipl": "ipl PATH - clear the machine and load a load file; PC <- start address",
        "step": "step - execute one instruction",
        "run": "run [COUNT] - step until the machine halts or faults",
        "reset": "reset - clear memory and registers",
        "load": "load - MBR <- MEM[MAR]",
        "load+": "load+ - MBR <- MEM[MAR], then MAR <- MAR + 1",
        "store": "store - MEM[MAR] <- MBR",
        "store+": "store+ - MEM[MAR] <- MBR, then MAR <- MAR + 1",
        "set": "set TARGET VALUE - write VALUE into PC, MAR, MBR, R0-R3 or X1-X3",
        "regs": "regs - show the registers",
        "dump": "dump [START [STOP]] - list memory, disassembled",
        "debug": "debug - toggle tracing of register and memory writes",
    }

    def __init__(self, *args, **kwargs):
        super(CalystoC6461, self).__init__(*args, **kwargs)
        self.machine = Machine(self)

    def get_usage(self):
        return """This is the Calysto C6461 Jupyter kernel.

A cell that starts with an operator command runs the commands, one per
line. Any other cell is assembled and loaded into memory (IPL).

Operator commands:

 ipl PATH                  - load a load file (txt/<stem>_load.txt)
 step                      - execute the next instruction
 run [COUNT]               - step until HLT or a fault
 reset                     - clear memory and registers
 load / load+              - MBR <- MEM[MAR] (then MAR + 1)
 store / store+            - MEM[MAR] <- MBR (then MAR + 1)
 set TARGET VALUE          - set PC, MAR, MBR, R0-R3, X1-X3
 regs                      - show registers
 dump [START [STOP]]       - list memory
 debug                     - toggle tracing

VALUES are octal (digits 0-7), 0x hex, or decimal.
"""

    def get_completions(self, info):
        token = info["help_obj"]
        matches = []
        for item in (list(OPCODES.keys()) + ["LOC", "Data"] +
                     sorted(self.machine.commands.keys())):
            if item.startswith(token) and item not in matches:
                matches.append(item)
        return matches

    def get_kernel_help_on(self, info, level=0, none_on_fail=False):
        expr = info["code"].strip()
        if expr in self.command_help:
            return self.command_help[expr]
        elif none_on_fail:
            return None
        else:
            return "No available help on '%s'" % expr

    def is_command(self, code):
        words = code.split()
        return bool(words) and words[0].lower() in self.machine.commands

    def render(self, status):
        if status.ok:
            if status.message:
                self.Print(status.message)
        else:
            self.Error("%s error: %s" % (status.kind, status.message))

    def do_execute_direct(self, code):
        try:
            self.execute_cell(code.rstrip())
        except Exception as exc:
            self.Error(str(exc))
        except KeyboardInterrupt:
            self.Error("Keyboard Interrupt!")

    def execute_cell(self, code):
        if self.is_command(code):
            for line in code.splitlines():
                if line.strip():
                    self.render(self.machine.execute(line))
            return
        try:
            assembly = Assembler().assemble_text(code)
        except C6461Error as exc:
            self.Error("Assembly error: %s" % exc)
            return
        self.Print(assembly.listing_text(), end="")
        image = LoadImage([LoadRecord(*record) for record in assembly.records])
        self.render(self.machine.ipl_image(image, assembly.start_address))
