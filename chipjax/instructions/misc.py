"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.constants import ADDRESS_MASK, FONT_GLYPH_SIZE, FONT_START, NUM_REGISTERS
from chipjax.instructions.common import as_u8, as_u16, set_register

_register_indices = jnp.arange(NUM_REGISTERS)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return set_register(state, instruction.x, state.delay_timer)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (16-bit wrap, VF untouched)."""
    return state.replace(I=as_u16(state.I + state.V[instruction.x]))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a key to go down, store its index in VX.

    A key counts only if it was up at the last timer tick. While waiting VX
    reads 0 and PC is wound back so the same opcode runs again next step.
    """
    pressed = state.keypad & ~state.previous_keypad
    any_pressed = jnp.any(pressed)
    state = set_register(state, instruction.x, jnp.where(any_pressed, jnp.argmax(pressed), 0))
    return state.replace(pc=as_u16(jnp.where(any_pressed, state.pc, state.pc - 2)))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.replace(I=as_u16(font_address))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (state.I + jnp.arange(3)) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I; I ends at I + X + 1."""
    register_mask = _register_indices <= instruction.x
    addresses = (state.I + _register_indices) & ADDRESS_MASK
    new_values = jnp.where(register_mask, state.V, state.memory[addresses])
    return state.replace(
        memory=state.memory.at[addresses].set(as_u8(new_values)),
        I=as_u16(state.I + instruction.x + 1),
    )


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I; I ends at I + X + 1."""
    register_mask = _register_indices <= instruction.x
    addresses = (state.I + _register_indices) & ADDRESS_MASK
    new_V = jnp.where(register_mask, state.memory[addresses], state.V)
    return state.replace(
        V=as_u8(new_V),
        I=as_u16(state.I + instruction.x + 1),
    )
