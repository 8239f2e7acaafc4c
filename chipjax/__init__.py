"""CHIP-8 emulator package."""

from chipjax.state import EmulatorState, StackState, create_state, sound_active
from chipjax.emulator import (
    execute, fetch, step, tick_timers, run_frame, run_frames,
    set_key, load_program, load_rom,
)
from chipjax.decode import DecodedInstruction, Instruction, decode
from chipjax.errors import (
    Chip8Error, LoadError, ProgramTooLargeError, ProgramNotFoundError,
    MachineFault, DecodeError, StackOverflowError, StackUnderflowError, Fault,
)
from chipjax.constants import *
from chipjax.machine import Chip8

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "sound_active",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_frame",
    "run_frames",
    "set_key",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Instruction",
    "decode",
    "Chip8",
    "Chip8Error",
    "LoadError",
    "ProgramTooLargeError",
    "ProgramNotFoundError",
    "MachineFault",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "Fault",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
