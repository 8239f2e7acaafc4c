"""Tests for the fetch-decode-execute cycle, timers, faults and loading."""

import jax
import jax.numpy as jnp
import pytest

from chipjax import (
    Fault, ProgramNotFoundError, ProgramTooLargeError, create_state, fetch,
    load_program, load_rom, run_frame, run_frames, set_key, sound_active, step,
    tick_timers,
)
from chipjax.constants import FONT_DATA, MAX_PROGRAM_SIZE
from conftest import assemble


class TestInitialState:
    """State produced by create_state."""

    def test_registers_zeroed(self, fresh_state):
        assert fresh_state.pc == 0x200
        assert fresh_state.stack.pointer == 0
        assert fresh_state.I == 0
        assert not jnp.any(fresh_state.V)
        assert not jnp.any(fresh_state.display)
        assert not jnp.any(fresh_state.keypad)
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert fresh_state.fault == Fault.NONE

    def test_font_loaded(self, fresh_state):
        assert list(map(int, fresh_state.memory[:0x50])) == FONT_DATA
        assert not jnp.any(fresh_state.memory[0x50:])

    def test_display_shape(self, fresh_state):
        assert fresh_state.display.shape == (64, 32)

    def test_seed_from_clock(self):
        state = create_state()
        assert 0 <= int(state.rng) <= 255


class TestStep:
    """Test step()."""

    def test_fetch_is_big_endian(self, fresh_state):
        state = load_program(fresh_state, assemble(0x6A12))
        state, instruction = fetch(state)
        assert instruction == 0x6A12
        assert state.pc == 0x202

    def test_step_advances_pc(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x6A12)))
        assert state.V[0xA] == 0x12
        assert state.pc == 0x202

    def test_skip_after_advance(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x3000)))  # V0 == 0
        assert state.pc == 0x204

    def test_unknown_opcode_is_skipped(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x8128)))
        assert state.pc == 0x202
        assert state.fault == Fault.NONE

    def test_call_and_return(self, fresh_state):
        """Return lands right after the call, SP back where it was."""
        program = assemble(0x2206, 0x0000, 0x0000, 0x00EE)  # call 0x206; ...; ret
        state = load_program(fresh_state, program)

        state = step(state)
        assert state.pc == 0x206
        assert state.stack.pointer == 1
        assert state.stack.data[1] == 0x202

        state = step(state)
        assert state.pc == 0x202
        assert state.stack.pointer == 0

    def test_wait_key_spins_until_edge(self, fresh_state):
        """FX0A re-runs until a key goes down between ticks."""
        state = load_program(fresh_state, assemble(0xF30A))

        state = step(state)
        state = step(state)
        assert state.pc == 0x200

        state = tick_timers(state)
        state = set_key(state, 0xB, True)
        state = step(state)

        assert state.V[3] == 0xB
        assert state.pc == 0x202

    def test_wait_key_held_across_tick(self, fresh_state):
        """A key that is still held after a tick is not a new press."""
        state = set_key(load_program(fresh_state, assemble(0xF30A)), 4, True)
        state = tick_timers(state)

        state = step(state)

        assert state.pc == 0x200


class TestFaults:
    """Faults halt the machine without corrupting state."""

    def test_pc_out_of_range(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x1FFF)))  # jump 0xFFF
        assert state.fault == Fault.NONE

        state = step(state)

        assert state.fault == Fault.DECODE
        assert state.pc == 0xFFF

    def test_last_valid_address(self, fresh_state):
        """0xFFE is still fetchable."""
        state = fresh_state.replace(pc=jnp.asarray(0xFFE, dtype=jnp.uint16))
        state = step(state)
        assert state.fault == Fault.NONE
        assert state.pc == 0x000  # 0x0000 at 0xFFE is SYS 0

    def test_stack_overflow(self, fresh_state):
        """The fifteenth nested call fills the stack; the next one faults."""
        state = load_program(fresh_state, assemble(0x2200))  # call self

        for _ in range(15):
            state = step(state)
        assert state.fault == Fault.NONE
        assert state.stack.pointer == 15

        state = step(state)

        assert state.fault == Fault.STACK_OVERFLOW
        assert state.stack.pointer == 15
        assert state.pc == 0x200

    def test_stack_underflow(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x00EE)))

        assert state.fault == Fault.STACK_UNDERFLOW
        assert state.stack.pointer == 0
        assert state.pc == 0x200

    def test_faulted_state_is_frozen(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x00EE, 0x6001)))
        frozen = step(state)

        assert frozen.pc == state.pc
        assert frozen.V[0] == 0
        assert frozen.fault == Fault.STACK_UNDERFLOW


class TestTimers:
    """Test tick_timers()."""

    def test_tick_decrements(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.asarray(3, dtype=jnp.uint8),
            sound_timer=jnp.asarray(1, dtype=jnp.uint8),
        )
        assert sound_active(state)

        state = tick_timers(state)
        assert state.delay_timer == 2
        assert state.sound_timer == 0
        assert not sound_active(state)

        state = tick_timers(state)
        state = tick_timers(state)
        state = tick_timers(state)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_tick_on_halted_state(self, fresh_state):
        state = step(load_program(fresh_state, assemble(0x00EE)))
        state = set_key(state, 1, True).replace(delay_timer=jnp.asarray(5, dtype=jnp.uint8))

        ticked = tick_timers(state)

        assert ticked.delay_timer == 5
        assert not ticked.previous_keypad[1]

    def test_tick_snapshots_keypad(self, fresh_state):
        state = set_key(fresh_state, 2, True)
        assert not state.previous_keypad[2]

        state = tick_timers(state)

        assert state.previous_keypad[2]


class TestFrames:
    """Test run_frame() and run_frames()."""

    def test_run_frame_executes_instructions(self, fresh_state):
        state = load_program(fresh_state, assemble(*[0x7001] * 12))

        state = run_frame(state, 10)

        assert state.V[0] == 10
        assert state.pc == 0x200 + 20

    def test_run_frame_ticks_timers(self, fresh_state):
        state = load_program(fresh_state, assemble(0x6005, 0xF015, 0x1204))

        state = run_frame(state, 10)

        assert state.delay_timer == 4

    def test_run_frames_countdown(self, fresh_state):
        """A program polling the delay timer sees it fall to zero."""
        program = assemble(
            0x6003,  # 200: V0 = 3
            0xF015,  # 202: DT = V0
            0xF107,  # 204: V1 = DT
            0x3100,  # 206: skip if V1 == 0
            0x1204,  # 208: loop
            0x120A,  # 20A: halt
        )
        state = load_program(fresh_state, program)

        state = run_frames(state, 10, 10)

        assert state.pc == 0x20A
        assert state.V[1] == 0

    def test_fault_stops_frame(self, fresh_state):
        """The frame that faults and every later one leave the state frozen."""
        state = load_program(fresh_state, assemble(0x7001, 0x00EE, 0x7001))
        state = set_key(state, 3, True).replace(
            delay_timer=jnp.asarray(10, dtype=jnp.uint8),
            sound_timer=jnp.asarray(10, dtype=jnp.uint8),
        )

        state = run_frame(state, 10)

        assert state.fault == Fault.STACK_UNDERFLOW
        assert state.V[0] == 1
        assert state.pc == 0x202
        assert state.delay_timer == 10
        assert state.sound_timer == 10
        assert not state.previous_keypad[3]

        state = run_frames(state, 3, 10)

        assert state.delay_timer == 10
        assert state.sound_timer == 10
        assert not state.previous_keypad[3]



class TestLoading:
    """Test load_program() and load_rom()."""

    def test_program_at_0x200(self, fresh_state):
        state = load_program(fresh_state, b"\x12\x34\x56")
        assert list(map(int, state.memory[0x200:0x203])) == [0x12, 0x34, 0x56]

    def test_largest_program_fits(self, fresh_state):
        state = load_program(fresh_state, b"\xAB" * MAX_PROGRAM_SIZE)
        assert state.memory[0xFFF] == 0xAB

    def test_program_too_large(self, fresh_state):
        with pytest.raises(ProgramTooLargeError):
            load_program(fresh_state, b"\x00" * (MAX_PROGRAM_SIZE + 1))

    def test_load_rom(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(assemble(0x00E0, 0x1200))

        state = load_rom(fresh_state, rom)

        assert state.memory[0x201] == 0xE0
        assert state.memory[0x202] == 0x12

    def test_load_rom_missing(self, fresh_state, tmp_path):
        with pytest.raises(ProgramNotFoundError) as info:
            load_rom(fresh_state, tmp_path / "missing.ch8")
        assert isinstance(info.value.__cause__, OSError)


class TestKeys:
    """Test set_key()."""

    def test_set_and_release(self, fresh_state):
        state = set_key(fresh_state, 0xF, True)
        assert state.keypad[0xF]
        state = set_key(state, 0xF, False)
        assert not state.keypad[0xF]

    @pytest.mark.parametrize("key", [-1, 16])
    def test_invalid_key(self, fresh_state, key):
        with pytest.raises(ValueError):
            set_key(fresh_state, key, True)


def test_vmap_instances_are_independent():
    """Batched machines share no state."""
    first = load_program(create_state(seed=0), assemble(0x6011))
    second = load_program(create_state(seed=0), assemble(0x6022))
    batched = jax.tree.map(lambda a, b: jnp.stack([a, b]), first, second)

    batched = jax.vmap(step)(batched)

    assert batched.V[0, 0] == 0x11
    assert batched.V[1, 0] == 0x22
    assert bool(jnp.all(batched.pc == 0x202))
