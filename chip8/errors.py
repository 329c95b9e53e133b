class Chip8Error(Exception):
    """Base class for everything the emulator core raises."""


class LoadError(Chip8Error):
    """A program image could not be loaded. The machine is left reset."""


class CapacityError(LoadError):
    """The program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size, capacity):
        super().__init__("ROM is %d bytes, only %d fit above 0x200" % (size, capacity))
        self.size = size
        self.capacity = capacity


class RomReadError(LoadError):
    """The byte source could not be opened or read."""


class StackError(Chip8Error):
    """Call/return went past either end of the 16-entry stack."""


class StackOverflow(StackError):
    """CALL with all 16 stack slots already in use."""


class StackUnderflow(StackError):
    """RET with an empty stack."""


class AddressError(Chip8Error, IndexError):
    """Memory, key or pixel index outside its fixed range."""
