# CPU - Cowgod's CHIP-8 Technical Reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
# One call to step() runs exactly one instruction: fetch, decode, execute, tick timers.
# Opcode handlers return the next program counter, or None for the default pc + 2.

import random

from . import config
from .config import log, warn
from .decoder import decode
from .errors import AddressError
from .machine import Machine


class Interpreter:
    """Fetch/decode/execute engine driving a single Machine."""

    def __init__(self, machine=None, rng=None):
        self.machine = machine if machine is not None else Machine()
        self.rng = rng if rng is not None else random.Random()
        self.cycle_count = 0
        self.unknown_opcodes = 0
        self.last_unknown = None
        self.address_errors = 0
        self.setup_funcmap()

    # ---- Load ROM ----
    def load(self, program):
        self._reset_counters()
        self.machine.load(program)

    def load_file(self, path):
        self._reset_counters()
        self.machine.load_file(path)

    def _reset_counters(self):
        self.cycle_count = 0
        self.unknown_opcodes = 0
        self.last_unknown = None
        self.address_errors = 0

    # ---- driver interface ----
    def take_draw_flag(self):
        return self.machine.take_draw_flag()

    def read_pixel(self, x, y):
        return self.machine.read_pixel(x, y)

    def set_key(self, index, pressed):
        self.machine.set_key(index, pressed)

    @property
    def sound_active(self):
        return self.machine.sound_active

    # ---- Cycle ----
    def step(self):
        """Run one instruction.

        A bad memory or key index is reported and the instruction is skipped.
        Only StackError escapes.
        """
        m = self.machine

        try:
            op = decode(m.fetch(m.pc))
            log("%03X: %04X  %s" % (m.pc, op.word, op))
            next_pc = self.funcmap[op.name](op)
        except AddressError as e:
            self.address_errors += 1
            warn("Address error at 0x%03X: %s" % (m.pc, e))
            next_pc = None
        m.pc = (m.pc + 2 if next_pc is None else next_pc) & 0xFFFF

        m.tick_timers()
        self.cycle_count += 1

    def run(self, cycles):
        for _ in range(cycles):
            self.step()

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            "SYS": self.op_SYS,              # 0nnn - machine code routine, ignored
            "CLS": self.op_CLS,              # 00E0 - clear the display
            "RET": self.op_RET,              # 00EE - return from subroutine
            "JP": self.op_JP,                # 1nnn - jump
            "CALL": self.op_CALL,            # 2nnn - call subroutine
            "SE_VX_KK": self.op_SE_Vx_kk,    # 3xkk
            "SNE_VX_KK": self.op_SNE_Vx_kk,  # 4xkk
            "SE_VX_VY": self.op_SE_Vx_Vy,    # 5xy0
            "LD_VX_KK": self.op_LD_Vx_kk,    # 6xkk
            "ADD_VX_KK": self.op_ADD_Vx_kk,  # 7xkk
            "LD_VX_VY": self.op_LD_Vx_Vy,    # 8xy0
            "OR": self.op_OR,                # 8xy1
            "AND": self.op_AND,              # 8xy2
            "XOR": self.op_XOR,              # 8xy3
            "ADD_VX_VY": self.op_ADD,        # 8xy4
            "SUB": self.op_SUB,              # 8xy5
            "SHR": self.op_SHR,              # 8xy6
            "SUBN": self.op_SUBN,            # 8xy7
            "SHL": self.op_SHL,              # 8xyE
            "SNE_VX_VY": self.op_SNE_Vx_Vy,  # 9xy0
            "LD_I": self.op_LD_I,            # Annn
            "JP_V0": self.op_JP_V0,          # Bnnn
            "RND": self.op_RND,              # Cxkk
            "DRW": self.op_DRW,              # Dxyn
            "SKP": self.op_SKP,              # Ex9E
            "SKNP": self.op_SKNP,            # ExA1
            "LD_VX_DT": self.op_LD_Vx_DT,    # Fx07
            "LD_VX_K": self.op_WAITKEY,      # Fx0A
            "LD_DT_VX": self.op_LD_DT_Vx,    # Fx15
            "LD_ST_VX": self.op_LD_ST_Vx,    # Fx18
            "ADD_I_VX": self.op_ADD_I_Vx,    # Fx1E
            "LD_F_VX": self.op_FONT,         # Fx29
            "LD_B_VX": self.op_BCD,          # Fx33
            "LD_I_VX": self.op_STORE,        # Fx55
            "LD_VX_I": self.op_LOAD,         # Fx65
            "UNKNOWN": self.op_UNKNOWN,
        }

    def _skip_if(self, condition):
        if condition:
            return self.machine.pc + 4
        return None

    # ---- opcode handlers ----
    def op_UNKNOWN(self, op):
        self.unknown_opcodes += 1
        self.last_unknown = op.word
        warn("Unknown opcode: %04X at 0x%03X" % (op.word, self.machine.pc))

    def op_SYS(self, op):
        # 0nnn is ignored on modern interpreters
        log("SYS call ignored (0nnn)")

    def op_CLS(self, op):
        self.machine.clear_display()

    def op_RET(self, op):
        # the stack holds the address of the CALL itself
        return self.machine.pop() + 2

    def op_JP(self, op):
        return op.nnn

    def op_CALL(self, op):
        self.machine.push(self.machine.pc)
        return op.nnn

    def op_SE_Vx_kk(self, op):
        return self._skip_if(self.machine.V[op.x] == op.kk)

    def op_SNE_Vx_kk(self, op):
        return self._skip_if(self.machine.V[op.x] != op.kk)

    def op_SE_Vx_Vy(self, op):
        V = self.machine.V
        return self._skip_if(V[op.x] == V[op.y])

    def op_SNE_Vx_Vy(self, op):
        V = self.machine.V
        return self._skip_if(V[op.x] != V[op.y])

    def op_LD_Vx_kk(self, op):
        self.machine.V[op.x] = op.kk

    def op_ADD_Vx_kk(self, op):
        V = self.machine.V
        V[op.x] = (V[op.x] + op.kk) & 0xFF

    # 8xy0..8xyE
    # VF is written after Vx so the flag wins when x is F.
    def op_LD_Vx_Vy(self, op):
        V = self.machine.V
        V[op.x] = V[op.y]

    def op_OR(self, op):
        V = self.machine.V
        V[op.x] |= V[op.y]

    def op_AND(self, op):
        V = self.machine.V
        V[op.x] &= V[op.y]

    def op_XOR(self, op):
        V = self.machine.V
        V[op.x] ^= V[op.y]

    def op_ADD(self, op):
        V = self.machine.V
        s = V[op.x] + V[op.y]
        V[op.x] = s & 0xFF
        V[0xF] = 1 if s > 0xFF else 0

    def op_SUB(self, op):
        V = self.machine.V
        not_borrow = 1 if V[op.x] > V[op.y] else 0
        V[op.x] = (V[op.x] - V[op.y]) & 0xFF
        V[0xF] = not_borrow

    def op_SHR(self, op):
        V = self.machine.V
        lsb = V[op.x] & 1
        V[op.x] >>= 1
        V[0xF] = lsb

    def op_SUBN(self, op):
        V = self.machine.V
        not_borrow = 1 if V[op.y] > V[op.x] else 0
        V[op.x] = (V[op.y] - V[op.x]) & 0xFF
        V[0xF] = not_borrow

    def op_SHL(self, op):
        V = self.machine.V
        msb = (V[op.x] >> 7) & 1
        V[op.x] = (V[op.x] << 1) & 0xFF
        V[0xF] = msb

    def op_LD_I(self, op):
        self.machine.I = op.nnn

    def op_JP_V0(self, op):
        return op.nnn + self.machine.V[0]

    def op_RND(self, op):
        self.machine.V[op.x] = self.rng.getrandbits(8) & op.kk

    def op_DRW(self, op):
        m = self.machine
        rows = m.read_block(m.I, op.n)
        m.V[0xF] = 0
        collision = m.draw_sprite(m.V[op.x], m.V[op.y], rows)
        m.V[0xF] = 1 if collision else 0
        log(f"Drew sprite, collision={m.V[0xF]}")

    def op_SKP(self, op):
        m = self.machine
        return self._skip_if(m.is_key_pressed(m.V[op.x]))

    def op_SKNP(self, op):
        m = self.machine
        return self._skip_if(not m.is_key_pressed(m.V[op.x]))

    # Fx07..Fx65 - timers, memory, I, and key input
    def op_LD_Vx_DT(self, op):
        self.machine.V[op.x] = self.machine.delay_timer

    def op_WAITKEY(self, op):
        m = self.machine
        pressed = m.pressed_key()
        if pressed is None:
            return m.pc  # stall, the same instruction runs again next cycle
        m.V[op.x] = pressed

    def op_LD_DT_Vx(self, op):
        self.machine.delay_timer = self.machine.V[op.x]

    def op_LD_ST_Vx(self, op):
        self.machine.sound_timer = self.machine.V[op.x]

    def op_ADD_I_Vx(self, op):
        m = self.machine
        new_i = m.I + m.V[op.x]
        m.I = new_i & 0xFFFF
        m.V[0xF] = 1 if new_i > 0xFFF else 0

    def op_FONT(self, op):
        m = self.machine
        m.I = m.V[op.x] * config.FONT_BYTES_PER_GLYPH

    def op_BCD(self, op):
        m = self.machine
        val = m.V[op.x]
        m.write_block(m.I, [val // 100, (val // 10) % 10, val % 10])

    def op_STORE(self, op):
        m = self.machine
        m.write_block(m.I, m.V[:op.x + 1])
        m.I += op.x + 1

    def op_LOAD(self, op):
        m = self.machine
        m.V[:op.x + 1] = list(m.read_block(m.I, op.x + 1))
        m.I += op.x + 1
