"""CHIP-8 emulator state structures."""

import time
from typing import Optional

import jax.numpy as jnp
from flax.struct import PyTreeNode

from chipjax.constants import (
    FONT_DATA, FONT_START, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START,
    SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE,
)
from chipjax.errors import Fault


class StackState(PyTreeNode):
    """Stack state for subroutine calls.

    ``pointer`` is pre-incremented on call and post-decremented on return,
    so slot 0 is never written and at most 15 calls can be nested.
    """
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    memory: jnp.ndarray
    pc: jnp.ndarray
    I: jnp.ndarray
    V: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    display: jnp.ndarray  # (SCREEN_WIDTH, SCREEN_HEIGHT), indexed [x, y]
    keypad: jnp.ndarray
    previous_keypad: jnp.ndarray
    rng: jnp.ndarray
    fault: jnp.ndarray


def clock_seed() -> int:
    """Seed for the random generator taken from the wall clock."""
    return int(time.time()) & 0xFF


def create_state(seed: Optional[int] = None) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        seed: Initial state of the random generator. Defaults to the wall clock.
    """
    if seed is None:
        seed = clock_seed()

    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(
        jnp.array(FONT_DATA, dtype=jnp.uint8)
    )

    return EmulatorState(
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        I=jnp.zeros((), dtype=jnp.uint16),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        stack=StackState(
            data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
            pointer=jnp.zeros((), dtype=jnp.uint8),
        ),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        previous_keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        rng=jnp.asarray(seed & 0xFF, dtype=jnp.uint8),
        fault=jnp.asarray(int(Fault.NONE), dtype=jnp.uint8),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the host should be emitting a tone."""
    return state.sound_timer > 0
