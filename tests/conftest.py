import pytest

from calysto_c6461.assembler import Assembler

SCENARIO = """\
     LOC 6
Six: Data 10
     Data 3
     Data End
     LDR 1,2,6
End: HLT ;STOP
"""

@pytest.fixture
def scenario():
    return SCENARIO

@pytest.fixture
def assembly():
    return Assembler().assemble_text(SCENARIO)

@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path
