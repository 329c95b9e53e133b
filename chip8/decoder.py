# Instruction decoding.
# Each 16-bit word is matched against a (mask, pattern) table, first match wins,
# and comes back as an Instruction tagged with its mnemonic. Words that match
# nothing decode as UNKNOWN instead of falling through.

from collections import namedtuple


_Instruction = namedtuple("Instruction", "name word nnn n x y kk")


class Instruction(_Instruction):
    __slots__ = ()

    def __str__(self):
        template = _syntax.get(self.name, "{name} 0x{word:04X}")
        return template.format(**self._asdict())


# decode table: (mask, pattern, mnemonic)
opcodes = [
    (0xFFFF, 0x00E0, "CLS"),
    (0xFFFF, 0x00EE, "RET"),
    (0xF000, 0x0000, "SYS"),

    (0xF000, 0x1000, "JP"),
    (0xF000, 0x2000, "CALL"),
    (0xF000, 0x3000, "SE_VX_KK"),
    (0xF000, 0x4000, "SNE_VX_KK"),
    (0xF000, 0x5000, "SE_VX_VY"),
    (0xF000, 0x6000, "LD_VX_KK"),
    (0xF000, 0x7000, "ADD_VX_KK"),

    (0xF00F, 0x8000, "LD_VX_VY"),
    (0xF00F, 0x8001, "OR"),
    (0xF00F, 0x8002, "AND"),
    (0xF00F, 0x8003, "XOR"),
    (0xF00F, 0x8004, "ADD_VX_VY"),
    (0xF00F, 0x8005, "SUB"),
    (0xF00F, 0x8006, "SHR"),
    (0xF00F, 0x8007, "SUBN"),
    (0xF00F, 0x800E, "SHL"),

    (0xF000, 0x9000, "SNE_VX_VY"),
    (0xF000, 0xA000, "LD_I"),
    (0xF000, 0xB000, "JP_V0"),
    (0xF000, 0xC000, "RND"),
    (0xF000, 0xD000, "DRW"),

    (0xF0FF, 0xE09E, "SKP"),
    (0xF0FF, 0xE0A1, "SKNP"),

    (0xF0FF, 0xF007, "LD_VX_DT"),
    (0xF0FF, 0xF00A, "LD_VX_K"),
    (0xF0FF, 0xF015, "LD_DT_VX"),
    (0xF0FF, 0xF018, "LD_ST_VX"),
    (0xF0FF, 0xF01E, "ADD_I_VX"),
    (0xF0FF, 0xF029, "LD_F_VX"),
    (0xF0FF, 0xF033, "LD_B_VX"),
    (0xF0FF, 0xF055, "LD_I_VX"),
    (0xF0FF, 0xF065, "LD_VX_I"),
]

MNEMONICS = [name for _, _, name in opcodes] + ["UNKNOWN"]

_syntax = {
    "CLS": "CLS",
    "RET": "RET",
    "SYS": "SYS 0x{nnn:03X}",
    "JP": "JP 0x{nnn:03X}",
    "CALL": "CALL 0x{nnn:03X}",
    "SE_VX_KK": "SE V{x:X}, 0x{kk:02X}",
    "SNE_VX_KK": "SNE V{x:X}, 0x{kk:02X}",
    "SE_VX_VY": "SE V{x:X}, V{y:X}",
    "LD_VX_KK": "LD V{x:X}, 0x{kk:02X}",
    "ADD_VX_KK": "ADD V{x:X}, 0x{kk:02X}",
    "LD_VX_VY": "LD V{x:X}, V{y:X}",
    "OR": "OR V{x:X}, V{y:X}",
    "AND": "AND V{x:X}, V{y:X}",
    "XOR": "XOR V{x:X}, V{y:X}",
    "ADD_VX_VY": "ADD V{x:X}, V{y:X}",
    "SUB": "SUB V{x:X}, V{y:X}",
    "SHR": "SHR V{x:X}",
    "SUBN": "SUBN V{x:X}, V{y:X}",
    "SHL": "SHL V{x:X}",
    "SNE_VX_VY": "SNE V{x:X}, V{y:X}",
    "LD_I": "LD I, 0x{nnn:03X}",
    "JP_V0": "JP V0, 0x{nnn:03X}",
    "RND": "RND V{x:X}, 0x{kk:02X}",
    "DRW": "DRW V{x:X}, V{y:X}, {n}",
    "SKP": "SKP V{x:X}",
    "SKNP": "SKNP V{x:X}",
    "LD_VX_DT": "LD V{x:X}, DT",
    "LD_VX_K": "LD V{x:X}, K",
    "LD_DT_VX": "LD DT, V{x:X}",
    "LD_ST_VX": "LD ST, V{x:X}",
    "ADD_I_VX": "ADD I, V{x:X}",
    "LD_F_VX": "LD F, V{x:X}",
    "LD_B_VX": "LD B, V{x:X}",
    "LD_I_VX": "LD [I], V{x:X}",
    "LD_VX_I": "LD V{x:X}, [I]",
    "UNKNOWN": "??? 0x{word:04X}",
}


def decode(word):
    """Decode a 16-bit instruction word. Never raises on unknown words."""
    word &= 0xFFFF
    name = "UNKNOWN"
    for mask, pattern, mnemonic in opcodes:
        if (word & mask) == pattern:
            name = mnemonic
            break
    return Instruction(
        name=name,
        word=word,
        nnn=word & 0x0FFF,
        n=word & 0x000F,
        x=(word >> 8) & 0x000F,
        y=(word >> 4) & 0x000F,
        kk=word & 0x00FF,
    )
