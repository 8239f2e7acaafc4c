"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Union
import os

import jax
import jax.lax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import Instruction, decode
from chipjax.constants import MAX_PC, MAX_PROGRAM_SIZE, NUM_KEYS, PROGRAM_START
from chipjax.errors import Fault, ProgramNotFoundError, ProgramTooLargeError
from chipjax.instructions.system import no_op, execute_clear_screen, execute_return, execute_sys
from chipjax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_down, execute_skip_if_key_up
)
from chipjax.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor,
    execute_alu_add, execute_alu_sub_xy, execute_alu_shift_right,
    execute_alu_sub_yx, execute_alu_shift_left
)
from chipjax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipjax.instructions.display import execute_display
from chipjax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

INSTRUCTION_HANDLERS = {
    Instruction.CLEAR: execute_clear_screen,
    Instruction.RETURN: execute_return,
    Instruction.SYS: execute_sys,
    Instruction.JUMP: execute_jump,
    Instruction.CALL: execute_call,
    Instruction.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Instruction.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Instruction.SKIP_EQ_REG: execute_skip_if_equal_register,
    Instruction.LOAD_IMM: execute_set,
    Instruction.ADD_IMM: execute_add,
    Instruction.COPY: execute_alu_set,
    Instruction.OR: execute_alu_or,
    Instruction.AND: execute_alu_and,
    Instruction.XOR: execute_alu_xor,
    Instruction.ADD_REG: execute_alu_add,
    Instruction.SUB: execute_alu_sub_xy,
    Instruction.SHR: execute_alu_shift_right,
    Instruction.SUBN: execute_alu_sub_yx,
    Instruction.SHL: execute_alu_shift_left,
    Instruction.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Instruction.LOAD_INDEX: execute_set_index,
    Instruction.JUMP_OFFSET: execute_jump_with_offset,
    Instruction.RANDOM: execute_random,
    Instruction.DRAW: execute_display,
    Instruction.SKIP_KEY_DOWN: execute_skip_if_key_down,
    Instruction.SKIP_KEY_UP: execute_skip_if_key_up,
    Instruction.READ_DELAY: execute_get_delay_timer,
    Instruction.WAIT_KEY: execute_wait_for_key,
    Instruction.WRITE_DELAY: execute_set_delay_timer,
    Instruction.WRITE_SOUND: execute_set_sound_timer,
    Instruction.ADD_INDEX: execute_add_to_index,
    Instruction.FONT_ADDR: execute_font_character,
    Instruction.BCD: execute_bcd_conversion,
    Instruction.STORE_REGS: execute_store_registers,
    Instruction.LOAD_REGS: execute_load_registers,
    Instruction.UNKNOWN: no_op,
}

_missing = set(Instruction) - set(INSTRUCTION_HANDLERS)
if _missing:
    raise ImportError(f"No handler for instructions: {sorted(m.name for m in _missing)}")

# Branch table for jax.lax.switch, ordered by tag value.
_BRANCHES = [INSTRUCTION_HANDLERS[kind] for kind in sorted(Instruction)]


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC is not advanced here; ``fetch`` (and therefore ``step``) does that
    before dispatch.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.kind, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC past it."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _cycle(state: EmulatorState) -> EmulatorState:
    def run(state):
        fetched, instruction = fetch(state)
        executed = execute(fetched, instruction)
        # A faulting instruction leaves everything but the fault code as it was.
        return jax.lax.cond(
            executed.fault == int(Fault.NONE),
            lambda: executed,
            lambda: state.replace(fault=executed.fault),
        )

    def decode_fault(state):
        return state.replace(fault=jnp.asarray(int(Fault.DECODE), dtype=jnp.uint8))

    return jax.lax.cond(state.pc <= MAX_PC, run, decode_fault, state)


@jax.jit
def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle. A faulted state is returned unchanged."""
    return jax.lax.cond(state.fault == int(Fault.NONE), _cycle, lambda s: s, state)


def _tick(state: EmulatorState) -> EmulatorState:
    return state.replace(
        delay_timer=jnp.astype(jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0), jnp.uint8),
        sound_timer=jnp.astype(jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0), jnp.uint8),
        previous_keypad=state.keypad,
    )


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Advance one timer tick: decrement non-zero timers and snapshot the keypad.

    A halted state is returned unchanged, like ``step``.
    """
    return jax.lax.cond(state.fault == int(Fault.NONE), _tick, lambda s: s, state)


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, instructions_per_tick: int) -> EmulatorState:
    """Run one frame: ``instructions_per_tick`` steps followed by a timer tick."""
    state = jax.lax.fori_loop(0, instructions_per_tick, lambda _, s: step(s), state)
    return tick_timers(state)


@partial(jax.jit, static_argnums=(1, 2))
def run_frames(state: EmulatorState, num_frames: int, instructions_per_tick: int) -> EmulatorState:
    """Run ``num_frames`` frames inside a single compiled loop."""
    return jax.lax.fori_loop(
        0, num_frames, lambda _, s: run_frame(s, instructions_per_tick), state
    )


def set_key(state: EmulatorState, key: int, is_down: bool) -> EmulatorState:
    """Set whether keypad key ``key`` (0-15) is held."""
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be in [0, {NUM_KEYS - 1}], got {key}")
    return state.replace(keypad=state.keypad.at[key].set(bool(is_down)))


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a raw program image into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(len(program), MAX_PROGRAM_SIZE)
    if not program:
        return state
    rom_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory)


def read_rom(filename: Union[str, os.PathLike]) -> bytes:
    """Read a ROM image from disk."""
    try:
        with open(filename, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ProgramNotFoundError(os.fspath(filename)) from e


def load_rom(state: EmulatorState, filename: Union[str, os.PathLike]) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    return load_program(state, read_rom(filename))
