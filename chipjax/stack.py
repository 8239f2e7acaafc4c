"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chipjax.constants import STACK_SIZE
from chipjax.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack, returning the new stack and an overflow flag.

    Slot 0 is never written, so the push that would make a 16th nested call
    overflows.
    """
    overflow = stack.pointer >= STACK_SIZE - 1
    pointer = jnp.astype(stack.pointer + 1, jnp.uint8)
    new_data = stack.data.at[pointer].set(jnp.astype(address, jnp.uint16))
    return stack.replace(data=new_data, pointer=pointer), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack, returning the new stack, the address and an underflow flag."""
    underflow = stack.pointer == 0
    address = stack.data[stack.pointer]
    pointer = jnp.astype(stack.pointer - 1, jnp.uint8)
    return stack.replace(pointer=pointer), address, underflow
