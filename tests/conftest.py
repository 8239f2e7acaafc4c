"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipjax import Chip8, create_state
from chipjax.config import MachineConfig
from chipjax.logging import EmulatorLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state(seed=0)


@pytest.fixture
def quiet_logger():
    return EmulatorLogger(log_level="QUIET")


@pytest.fixture
def machine(quiet_logger):
    """Provide a machine with a fixed seed and silenced logging."""
    return Chip8(config=MachineConfig(seed=0), logger=quiet_logger)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*opcodes):
    """Helper to turn 16-bit opcodes into a big-endian program image."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)
