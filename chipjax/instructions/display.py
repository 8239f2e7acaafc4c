"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.constants import ADDRESS_MASK, FLAG_REGISTER, SCREEN_WIDTH, SCREEN_HEIGHT

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def _draw_sprite(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    row_offset = yy - sprite_y
    col_offset = xx - sprite_x

    # Only on-screen cells exist in the grid, so sprites clip at the edges.
    in_sprite = (col_offset >= 0) & (col_offset < 8) & (row_offset >= 0) & (row_offset < instruction.n)

    sprite_bytes = state.memory[(state.I + row_offset) & ADDRESS_MASK]
    shift = jnp.clip(7 - col_offset, 0, 7)
    sprite = (((sprite_bytes >> shift) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
    )


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprites are read from memory at I and XORed onto the display. VF is set
    to 1 when a lit pixel is turned off and 0 otherwise. Pixels falling off
    the right or bottom edge are clipped. Coordinates beyond X=63 or Y=32
    (before wrapping) reject the draw entirely and leave VF untouched.
    """
    rejected = (state.V[instruction.x] > SCREEN_WIDTH - 1) | (state.V[instruction.y] > SCREEN_HEIGHT)
    return jax.lax.cond(
        rejected,
        lambda s, i: s,
        _draw_sprite,
        state, instruction
    )
