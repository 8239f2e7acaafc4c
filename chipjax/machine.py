"""Stateful host-facing wrapper around the functional CHIP-8 core."""

import os
from typing import Optional, Union

import numpy as np

from chipjax import emulator
from chipjax.config import MachineConfig
from chipjax.errors import Fault, fault_to_error
from chipjax.logging import EmulatorLogger
from chipjax.state import EmulatorState, clock_seed, create_state, sound_active


class Chip8:
    """A single CHIP-8 machine owned by a host loop.

    The host drives it with ``step`` and ``tick_timers`` (or ``run_frame``),
    feeds input through ``set_key`` and reads ``display`` and
    ``sound_active``. Faults raise a ``MachineFault`` subclass and leave the
    machine halted until ``reset`` or a new program is loaded.
    """

    def __init__(self, config: Optional[MachineConfig] = None, logger: Optional[EmulatorLogger] = None):
        self.config = config or MachineConfig()
        self.logger = logger or EmulatorLogger()
        self.state: EmulatorState = None
        self.reset()

    def reset(self):
        """Zero the machine and reload the font."""
        seed = self.config.seed if self.config.seed is not None else clock_seed()
        self.state = create_state(seed)
        self.logger.log_reset(seed)

    def load_program(self, program: bytes, source: Optional[str] = None):
        """Reset the machine and load a raw program image at 0x200.

        Raises ``ProgramTooLargeError`` without touching the machine when the
        image does not fit.
        """
        # Validate against a fresh state first so a failed load leaves us untouched.
        seed = self.config.seed if self.config.seed is not None else clock_seed()
        loaded = emulator.load_program(create_state(seed), program)
        self.state = loaded
        self.logger.log_reset(seed)
        self.logger.log_program_loaded(len(program), source)

    def load_rom(self, path: Union[str, os.PathLike]):
        """Read a ROM file and load it; see ``load_program``."""
        self.load_program(emulator.read_rom(path), source=os.fspath(path))

    def step(self):
        """Execute exactly one instruction."""
        self.state = emulator.step(self.state)
        self._check_fault()

    def tick_timers(self):
        """Advance one timer tick."""
        self.state = emulator.tick_timers(self.state)

    def run_frame(self, instructions_per_tick: Optional[int] = None):
        """Run one frame of ``instructions_per_tick`` steps and a timer tick."""
        if instructions_per_tick is None:
            instructions_per_tick = self.config.instructions_per_tick
        self.state = emulator.run_frame(self.state, instructions_per_tick)
        self._check_fault()

    def set_key(self, key: int, is_down: bool):
        self.state = emulator.set_key(self.state, key, is_down)

    def _check_fault(self):
        code = int(self.state.fault)
        if code == Fault.NONE:
            return
        error = fault_to_error(code, int(self.state.pc))
        self.logger.log_fault(error, self.state)
        raise error

    @property
    def halted(self) -> bool:
        return int(self.state.fault) != Fault.NONE

    @property
    def fault(self) -> Fault:
        return Fault(int(self.state.fault))

    @property
    def display(self) -> np.ndarray:
        """Read-only (64, 32) boolean pixel grid indexed [x, y]."""
        pixels = np.array(self.state.display, dtype=np.bool_)
        pixels.flags.writeable = False
        return pixels

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is non-zero."""
        return bool(sound_active(self.state))

    @property
    def pc(self) -> int:
        return int(self.state.pc)
