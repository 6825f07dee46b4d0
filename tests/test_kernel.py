import metakernel
import pytest

from calysto_c6461.kernel import CalystoC6461
from calysto_c6461.machine import HALTED, Machine

class Console(object):
    """ Collects kernel output instead of sending it to a frontend """
    def __init__(self):
        self.out = []
        self.err = []

    def Print(self, *args, **kwargs):
        self.out.append(" ".join(str(arg) for arg in args))

    def Error(self, *args, **kwargs):
        self.err.append(" ".join(str(arg) for arg in args))

@pytest.fixture
def kernel():
    kernel = CalystoC6461.__new__(CalystoC6461)
    console = Console()
    kernel.Print = console.Print
    kernel.Error = console.Error
    kernel.console = console
    kernel.machine = Machine(kernel)
    return kernel

def test_source_cell_is_assembled_and_loaded(kernel, scenario):
    kernel.do_execute_direct(scenario)
    assert kernel.console.err == []
    assert "000011  002606  LDR 1,2,6" in kernel.console.out[0]
    assert kernel.machine.registers.pc == 9
    assert kernel.machine.memory.read(6) == 10

def test_command_cell_runs_each_line(kernel, scenario):
    kernel.do_execute_direct(scenario)
    kernel.do_execute_direct("step\nstep\n\nregs")
    assert kernel.machine.state == HALTED
    assert kernel.machine.registers.get_gpr(1) == 10
    assert "R1: 000012" in kernel.console.out[-1]

def test_errors_go_to_error_output(kernel):
    kernel.do_execute_direct("A: Data 1\nA: Data 2")
    assert kernel.console.err == ["Assembly error: line 2: Duplicate label 'A'"]
    kernel.do_execute_direct("set X0 1")
    assert kernel.console.err[-1].startswith("command error:")

def test_completions_and_help(kernel):
    assert kernel.get_completions({"help_obj": "LD"}) == ["LDR", "LDA", "LDX"]
    assert "MBR" in kernel.get_kernel_help_on({"code": "load"})
    assert kernel.get_kernel_help_on({"code": "xyzzy"}, none_on_fail=True) is None

def test_kernel_is_a_metakernel():
    assert issubclass(CalystoC6461, metakernel.MetaKernel)

def test_unexpected_errors_are_reported(kernel, monkeypatch):
    def broken(line):
        raise RuntimeError("console wiring broke")
    monkeypatch.setattr(kernel.machine, "execute", broken)
    kernel.do_execute_direct("step")
    assert kernel.console.err == ["console wiring broke"]
