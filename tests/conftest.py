import random

import pytest

from chip8 import Interpreter, Machine


def assemble(*words):
    """Pack 16-bit instruction words into a big-endian ROM image."""
    rom = bytearray()
    for word in words:
        rom += bytes([(word >> 8) & 0xFF, word & 0xFF])
    return bytes(rom)


@pytest.fixture
def machine():
    return Machine()


@pytest.fixture
def cpu(machine):
    return Interpreter(machine, rng=random.Random(1234))


@pytest.fixture
def run_program(cpu):
    """Load the given words at 0x200 and return the interpreter."""
    def _run(*words, cycles=0):
        cpu.load(assemble(*words))
        cpu.run(cycles)
        return cpu
    return _run
