"""Helpers shared by instruction implementations."""

import jax.numpy as jnp
from chipjax.constants import FLAG_REGISTER
from chipjax.errors import Fault
from chipjax.state import EmulatorState


def as_u8(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def as_u16(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint16)


def set_register(state: EmulatorState, index, value) -> EmulatorState:
    return state.replace(V=state.V.at[index].set(as_u8(value)))


def set_result_and_flag(state: EmulatorState, index, result, flag) -> EmulatorState:
    """Write VX, then VF, so the flag wins when X is F."""
    V = state.V.at[index].set(as_u8(result))
    return state.replace(V=V.at[FLAG_REGISTER].set(as_u8(flag)))


def skip_if(state: EmulatorState, condition) -> EmulatorState:
    """Advance PC past the next instruction when condition holds."""
    return state.replace(pc=as_u16(jnp.where(condition, state.pc + 2, state.pc)))


def raise_fault(state: EmulatorState, condition, fault: Fault) -> EmulatorState:
    """Record fault when condition holds, keeping any earlier fault."""
    code = jnp.where(condition & (state.fault == int(Fault.NONE)), int(fault), state.fault)
    return state.replace(fault=as_u8(code))
