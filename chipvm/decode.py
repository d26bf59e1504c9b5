"""CHIP-8 instruction decoding.

Decoding is a two-level table lookup. The leading nibble selects an entry of
``INSTRUCTION_TABLE``: either a mnemonic directly, or a family description
``(field, subtable, fallback)`` where ``field`` names the operand that keys
``subtable``. A family without a fallback rejects unlisted keys with
``UnknownOpcode``.
"""

from chex import dataclass

from chipvm.errors import UnknownOpcode


INSTRUCTION_TABLE = {
    0x0: ("nnn", {0x0E0: "CLS", 0x0EE: "RET"}, "SYS"),
    0x1: "JP",
    0x2: "CALL",
    0x3: "SE_BYTE",
    0x4: "SNE_BYTE",
    0x5: "SE_REG",
    0x6: "LD_BYTE",
    0x7: "ADD_BYTE",
    0x8: ("n", {
        0x0: "LD_REG",
        0x1: "OR",
        0x2: "AND",
        0x3: "XOR",
        0x4: "ADD_REG",
        0x5: "SUB",
        0x6: "SHR",
        0x7: "SUBN",
        0xE: "SHL",
    }, None),
    0x9: "SNE_REG",
    0xA: "LD_I",
    0xB: "JP_V0",
    0xC: "RND",
    0xD: "DRW",
    0xE: ("nn", {0x9E: "SKP", 0xA1: "SKNP"}, None),
    0xF: ("nn", {
        0x07: "LD_VX_DT",
        0x0A: "LD_VX_K",
        0x15: "LD_DT_VX",
        0x18: "LD_ST_VX",
        0x1E: "ADD_I",
        0x29: "LD_F",
        0x33: "LD_B",
        0x55: "LD_I_VX",
        0x65: "LD_VX_I",
    }, None),
}

# Assembly-style rendering of each mnemonic, used by execution traces
ASSEMBLY_FORMATS = {
    "CLS": "CLS",
    "RET": "RET",
    "SYS": "SYS 0x{nnn:03X}",
    "JP": "JP 0x{nnn:03X}",
    "CALL": "CALL 0x{nnn:03X}",
    "SE_BYTE": "SE V{x:X}, 0x{nn:02X}",
    "SNE_BYTE": "SNE V{x:X}, 0x{nn:02X}",
    "SE_REG": "SE V{x:X}, V{y:X}",
    "LD_BYTE": "LD V{x:X}, 0x{nn:02X}",
    "ADD_BYTE": "ADD V{x:X}, 0x{nn:02X}",
    "LD_REG": "LD V{x:X}, V{y:X}",
    "OR": "OR V{x:X}, V{y:X}",
    "AND": "AND V{x:X}, V{y:X}",
    "XOR": "XOR V{x:X}, V{y:X}",
    "ADD_REG": "ADD V{x:X}, V{y:X}",
    "SUB": "SUB V{x:X}, V{y:X}",
    "SHR": "SHR V{x:X}",
    "SUBN": "SUBN V{x:X}, V{y:X}",
    "SHL": "SHL V{x:X}",
    "SNE_REG": "SNE V{x:X}, V{y:X}",
    "LD_I": "LD I, 0x{nnn:03X}",
    "JP_V0": "JP V0, 0x{nnn:03X}",
    "RND": "RND V{x:X}, 0x{nn:02X}",
    "DRW": "DRW V{x:X}, V{y:X}, {n}",
    "SKP": "SKP V{x:X}",
    "SKNP": "SKNP V{x:X}",
    "LD_VX_DT": "LD V{x:X}, DT",
    "LD_VX_K": "LD V{x:X}, K",
    "LD_DT_VX": "LD DT, V{x:X}",
    "LD_ST_VX": "LD ST, V{x:X}",
    "ADD_I": "ADD I, V{x:X}",
    "LD_F": "LD F, V{x:X}",
    "LD_B": "LD B, V{x:X}",
    "LD_I_VX": "LD [I], V{x:X}",
    "LD_VX_I": "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int    # First nibble
    x: int         # Second nibble (VX register)
    y: int         # Third nibble (VY register)
    n: int         # Fourth nibble (4-bit immediate)
    nn: int        # Last byte (8-bit immediate)
    nnn: int       # Last 12 bits (12-bit address)
    mnemonic: str  # Instruction variant tag

    def describe(self) -> str:
        """Assembly-like text, e.g. ``DRW V0, V1, 5``."""
        return ASSEMBLY_FORMATS[self.mnemonic].format(
            x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn
        )


def _resolve_mnemonic(fields: dict) -> str:
    entry = INSTRUCTION_TABLE[fields["opcode"]]
    if isinstance(entry, str):
        return entry
    key_field, subtable, fallback = entry
    mnemonic = subtable.get(fields[key_field], fallback)
    if mnemonic is None:
        raise UnknownOpcode(fields["raw"])
    return mnemonic


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components.

    Raises:
        UnknownOpcode: if the word matches no instruction of its family.
    """
    instruction = int(instruction) & 0xFFFF
    fields = dict(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
    return DecodedInstruction(**fields, mnemonic=_resolve_mnemonic(fields))
