# Machine state for the CHIP-8 virtual machine.
# Memory, registers, stack, frame buffer, keypad and timers all live on one Machine
# object which the interpreter mutates one instruction at a time.

import numpy as np

from . import config
from .config import log
from .errors import AddressError, CapacityError, RomReadError, StackOverflow, StackUnderflow


class Machine:
    """All state of one CHIP-8 machine.

    The stack pointer is the index of the first unused stack slot, so
    ``sp == 0`` means the stack is empty and ``sp == 16`` means it is full.
    """

    def __init__(self):
        self.memory = bytearray(config.MEMORY_SIZE)
        self.V = [0] * config.REGISTER_COUNT
        self.I = 0
        self.pc = config.PROGRAM_START
        self.stack = np.zeros(config.STACK_SIZE, dtype=np.uint16)
        self.sp = 0
        self.display = np.zeros((config.height, config.width), dtype=np.uint8)
        self.keys = np.zeros(config.KEY_COUNT, dtype=bool)
        self.delay_timer = 0
        self.sound_timer = 0
        self.draw_flag = False
        self.sound_active = False
        self.reset()

    def reset(self):
        self.memory[:] = bytes(config.MEMORY_SIZE)
        self.memory[:len(config.fontset)] = bytes(config.fontset)
        self.V = [0] * config.REGISTER_COUNT
        self.I = 0
        self.pc = config.PROGRAM_START
        self.stack.fill(0)
        self.sp = 0
        self.display.fill(0)
        self.keys.fill(False)
        self.delay_timer = 0
        self.sound_timer = 0
        self.draw_flag = False
        self.sound_active = False

    # ---- Load ROM ----
    def load(self, program):
        """Reset the machine and copy a program image to 0x200.

        ``program`` is either bytes-like or a binary file object. On any
        failure the machine is left in its freshly reset state.
        """
        self.reset()
        if hasattr(program, "read"):
            try:
                program = program.read()
            except OSError as exc:
                raise RomReadError("Unable to read ROM: %s" % exc) from exc
        data = bytes(program)
        if len(data) > config.MAX_PROGRAM_SIZE:
            raise CapacityError(len(data), config.MAX_PROGRAM_SIZE)
        start = config.PROGRAM_START
        self.memory[start:start + len(data)] = data
        log("Loaded %d bytes at 0x%03X" % (len(data), start))

    def load_file(self, path):
        log("Loading ROM:", path)
        try:
            f = open(path, "rb")
        except OSError as exc:
            self.reset()
            raise RomReadError("Unable to open %s: %s" % (path, exc)) from exc
        with f:
            self.load(f)

    # ---- Memory ----
    def _check_address(self, addr, count=1):
        if addr < 0 or addr + count > config.MEMORY_SIZE:
            raise AddressError("memory access 0x%X..0x%X out of range" % (addr, addr + count - 1))

    def read_byte(self, addr):
        self._check_address(addr)
        return self.memory[addr]

    def write_byte(self, addr, value):
        self._check_address(addr)
        self.memory[addr] = value & 0xFF

    def read_block(self, addr, count):
        self._check_address(addr, count)
        return bytes(self.memory[addr:addr + count])

    def write_block(self, addr, data):
        self._check_address(addr, len(data))
        self.memory[addr:addr + len(data)] = bytes(data)

    def fetch(self, addr):
        # big-endian instruction word
        self._check_address(addr, 2)
        return (self.memory[addr] << 8) | self.memory[addr + 1]

    # ---- Stack ----
    def push(self, addr):
        if self.sp >= config.STACK_SIZE:
            raise StackOverflow("call nested deeper than %d levels at 0x%03X" % (config.STACK_SIZE, self.pc))
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflow("return with empty stack at 0x%03X" % self.pc)
        self.sp -= 1
        return int(self.stack[self.sp])

    # ---- Input ----
    def set_key(self, index, pressed):
        if not 0 <= index < config.KEY_COUNT:
            raise AddressError("no key %r" % (index,))
        self.keys[index] = bool(pressed)

    def is_key_pressed(self, index):
        if not 0 <= index < config.KEY_COUNT:
            raise AddressError("no key %r" % (index,))
        return bool(self.keys[index])

    def pressed_key(self):
        """Lowest-indexed key currently held, or None."""
        pressed = np.flatnonzero(self.keys)
        if len(pressed) == 0:
            return None
        return int(pressed[0])

    # ---- Display ----
    def take_draw_flag(self):
        flag = self.draw_flag
        self.draw_flag = False
        return flag

    def read_pixel(self, x, y):
        if not (0 <= x < config.width and 0 <= y < config.height):
            raise AddressError("pixel (%r, %r) out of range" % (x, y))
        return bool(self.display[y, x])

    def clear_display(self):
        self.display.fill(0)
        self.draw_flag = True

    def draw_sprite(self, x, y, rows):
        """XOR ``rows`` (one byte per row, MSB leftmost) onto the frame buffer.

        Both axes wrap per pixel. Returns True when any set sprite bit landed
        on a pixel that was already on.
        """
        ox = x % config.width
        oy = y % config.height
        collision = False
        for row, bits in enumerate(rows):
            py = (oy + row) % config.height
            for col in range(8):
                if not bits & (0x80 >> col):
                    continue
                px = (ox + col) % config.width
                if self.display[py, px]:
                    collision = True
                self.display[py, px] ^= 1
        self.draw_flag = True
        return collision

    # ---- timers ----
    def tick_timers(self):
        if self.delay_timer > 0:
            self.delay_timer -= 1

        self.sound_active = self.sound_timer > 0
        if self.sound_active:
            self.sound_timer -= 1
            log("BEEP")
