"""CHIP-8 memory and register operations."""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.constants import RNG_INCREMENT, RNG_MULTIPLIER
from chipjax.instructions.common import as_u8, as_u16, set_register


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return set_register(state, instruction.x, instruction.nn)


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping without a carry flag."""
    return set_register(state, instruction.x, (state.V[instruction.x] + instruction.nn) & 0xFF)


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=as_u16(instruction.nnn))


def next_random(rng):
    """Advance the 8-bit linear congruential generator."""
    return as_u8((jnp.astype(rng, jnp.uint32) * RNG_MULTIPLIER + RNG_INCREMENT) & 0xFF)


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    rng = next_random(state.rng)
    state = set_register(state, instruction.x, rng & instruction.nn)
    return state.replace(rng=rng)
