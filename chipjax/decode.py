"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Instruction(IntEnum):
    """Tag identifying which of the 35 instructions an opcode encodes."""
    CLEAR = 0               # 00E0
    RETURN = 1              # 00EE
    SYS = 2                 # 0NNN
    JUMP = 3                # 1NNN
    CALL = 4                # 2NNN
    SKIP_EQ_IMM = 5         # 3XKK
    SKIP_NE_IMM = 6         # 4XKK
    SKIP_EQ_REG = 7         # 5XY0
    LOAD_IMM = 8            # 6XKK
    ADD_IMM = 9             # 7XKK
    COPY = 10               # 8XY0
    OR = 11                 # 8XY1
    AND = 12                # 8XY2
    XOR = 13                # 8XY3
    ADD_REG = 14            # 8XY4
    SUB = 15                # 8XY5
    SHR = 16                # 8XY6
    SUBN = 17               # 8XY7
    SHL = 18                # 8XYE
    SKIP_NE_REG = 19        # 9XY0
    LOAD_INDEX = 20         # ANNN
    JUMP_OFFSET = 21        # BNNN
    RANDOM = 22             # CXKK
    DRAW = 23               # DXYN
    SKIP_KEY_DOWN = 24      # EX9E
    SKIP_KEY_UP = 25        # EXA1
    READ_DELAY = 26         # FX07
    WAIT_KEY = 27           # FX0A
    WRITE_DELAY = 28        # FX15
    WRITE_SOUND = 29        # FX18
    ADD_INDEX = 30          # FX1E
    FONT_ADDR = 31          # FX29
    BCD = 32                # FX33
    STORE_REGS = 33         # FX55
    LOAD_REGS = 34          # FX65
    UNKNOWN = 35


# Sub-opcode tables for the families that select on the low nibble or byte.
_ALU_OPS = {
    0x0: Instruction.COPY, 0x1: Instruction.OR, 0x2: Instruction.AND,
    0x3: Instruction.XOR, 0x4: Instruction.ADD_REG, 0x5: Instruction.SUB,
    0x6: Instruction.SHR, 0x7: Instruction.SUBN, 0xE: Instruction.SHL,
}

_KEY_OPS = {0x9E: Instruction.SKIP_KEY_DOWN, 0xA1: Instruction.SKIP_KEY_UP}

_MISC_OPS = {
    0x07: Instruction.READ_DELAY, 0x0A: Instruction.WAIT_KEY,
    0x15: Instruction.WRITE_DELAY, 0x18: Instruction.WRITE_SOUND,
    0x1E: Instruction.ADD_INDEX, 0x29: Instruction.FONT_ADDR,
    0x33: Instruction.BCD, 0x55: Instruction.STORE_REGS,
    0x65: Instruction.LOAD_REGS,
}

_SINGLE_OPS = {
    0x1: Instruction.JUMP, 0x2: Instruction.CALL, 0x3: Instruction.SKIP_EQ_IMM,
    0x4: Instruction.SKIP_NE_IMM, 0x6: Instruction.LOAD_IMM, 0x7: Instruction.ADD_IMM,
    0xA: Instruction.LOAD_INDEX, 0xB: Instruction.JUMP_OFFSET,
    0xC: Instruction.RANDOM, 0xD: Instruction.DRAW,
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    kind: int    # Instruction tag
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate, "kk")
    nnn: int     # Last 12 bits (12-bit address)


def classify(raw, opcode, n, nn) -> jnp.ndarray:
    """Map opcode fields to an ``Instruction`` tag; works on traced values."""
    conditions = [raw == 0x00E0, raw == 0x00EE, opcode == 0x0]
    choices = [Instruction.CLEAR, Instruction.RETURN, Instruction.SYS]

    for family, kind in _SINGLE_OPS.items():
        conditions.append(opcode == family)
        choices.append(kind)

    conditions += [(opcode == 0x5) & (n == 0), (opcode == 0x9) & (n == 0)]
    choices += [Instruction.SKIP_EQ_REG, Instruction.SKIP_NE_REG]

    for family, table, field in ((0x8, _ALU_OPS, n), (0xE, _KEY_OPS, nn), (0xF, _MISC_OPS, nn)):
        for sub_opcode, kind in table.items():
            conditions.append((opcode == family) & (field == sub_opcode))
            choices.append(kind)

    return jnp.select(
        conditions,
        [jnp.int32(int(kind)) for kind in choices],
        default=jnp.int32(int(Instruction.UNKNOWN)),
    )


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    raw = jnp.astype(jnp.asarray(instruction), jnp.int32) & 0xFFFF
    opcode = (raw & 0xF000) >> 12
    n = raw & 0x000F
    nn = raw & 0x00FF
    return DecodedInstruction(
        raw=raw,
        kind=classify(raw, opcode, n, nn),
        opcode=opcode,
        x=(raw & 0x0F00) >> 8,
        y=(raw & 0x00F0) >> 4,
        n=n,
        nn=nn,
        nnn=raw & 0x0FFF,
    )
