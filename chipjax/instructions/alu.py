"""CHIP-8 ALU operations (8xxx).

Each ``alu_*`` function maps ``(vx, vy)`` to ``(result, vf)``; ``vf`` of
``None`` leaves the flag register alone. Shifts read VY and the bitwise
operations clear VF, matching the original COSMAC VIP interpreter.
"""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.instructions.common import set_register, set_result_and_flag


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY, VF = 0."""
    return vx | vy, 0


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY, VF = 0."""
    return vx & vy, 0


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY, VF = 0."""
    return vx ^ vy, 0


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    return result & 0xFF, result > 0xFF


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = 1 when VX > VY."""
    return (jnp.astype(vx, jnp.int32) - vy) & 0xFF, vx > vy


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX = VY >> 1, VF = shifted out bit."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when VY > VX."""
    return (jnp.astype(vy, jnp.int32) - vx) & 0xFF, vy > vx


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX = VY << 1, VF = shifted out bit."""
    return (jnp.astype(vy, jnp.int32) << 1) & 0xFF, (vy >> 7) & 1


def make_alu_instruction(operation):
    """Factory wrapping an ``alu_*`` function as an instruction."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, vf = operation(vx, vy)
        if vf is None:
            return set_register(state, instruction.x, result)
        return set_result_and_flag(state, instruction.x, result, vf)
    alu_instruction.__doc__ = operation.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
