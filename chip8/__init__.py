"""CHIP-8 virtual machine: machine state, decoder and interpreter."""

from .decoder import Instruction, decode
from .errors import (
    AddressError,
    CapacityError,
    Chip8Error,
    LoadError,
    RomReadError,
    StackError,
    StackOverflow,
    StackUnderflow,
)
from .interpreter import Interpreter
from .machine import Machine

__version__ = "1.0.0"

__all__ = [
    "AddressError",
    "CapacityError",
    "Chip8Error",
    "Instruction",
    "Interpreter",
    "LoadError",
    "Machine",
    "RomReadError",
    "StackError",
    "StackOverflow",
    "StackUnderflow",
    "decode",
]
