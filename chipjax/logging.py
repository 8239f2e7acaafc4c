"""Console logging for the CHIP-8 emulator.

``EmulatorLogger`` reports machine events (loads, resets, faults, register
dumps) to stdout. ``FrameProgress`` drives a tqdm bar from inside a jitted
frame loop through ``io_callback``.
"""

import sys
import time
from typing import Callable, Optional

import jax
from jax.experimental import io_callback
from tqdm import tqdm

from chipjax.errors import MachineFault

# QUIET is a threshold only; nothing is logged at it.
LEVELS = {"DEBUG": 0, "INFO": 1, "ERROR": 2, "QUIET": 3}

_COLORS = {"DEBUG": "\033[36m", "INFO": "\033[32m", "ERROR": "\033[31m"}
_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled stdout logger with elapsed-time stamps."""

    def __init__(
        self,
        name: str = "Chipjax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        level = log_level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.name = name
        self.log_level = level
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS[self.log_level]

    def log(self, level: str, message: str):
        if not self.enabled(level):
            return
        tag = f"[{level:>5s}]"
        if self.use_colors:
            tag = f"{_COLORS[level]}{tag}{_RESET}"
        stamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{stamp}{tag}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def error(self, message: str):
        self.log("ERROR", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for machine lifecycle events.

    Messages about a running machine carry its PC so a log line can be
    matched to the instruction that produced it.
    """

    def __init__(self, name: str = "Chip8", **kwargs):
        super().__init__(name, **kwargs)

    def log_reset(self, seed: int):
        self.debug(f"Machine reset (rng seed 0x{seed:02X})")

    def log_program_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} byte program{origin} at 0x200")

    def log_fault(self, error: MachineFault, state=None):
        """Report a halt, followed by a register dump at DEBUG when ``state`` is given."""
        self.error(f"[PC={error.pc:03X}] {error.fault.name}: {error}")
        if state is not None:
            self.log_registers(state)

    def log_run(self, frames: int, instructions_per_tick: int, state):
        self.info(
            f"[PC={int(state.pc):03X}] Ran {frames} frames "
            f"({frames * instructions_per_tick} instructions)"
        )

    def log_registers(self, state):
        """Dump registers at DEBUG level."""
        if not self.enabled("DEBUG"):
            return
        registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
        self.debug(
            f"[PC={int(state.pc):03X}] I={int(state.I):03X} SP={int(state.stack.pointer):X} "
            f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} | {registers}"
        )


class FrameProgress:
    """tqdm bar advanced from inside a jitted ``fori_loop`` over frames.

    The bar opens before frame 0 and moves forward after every
    ``update_every`` completed frames. Frames left over at the end are
    flushed when the last frame completes, so a finished run always shows
    ``total`` frames.

    Usage::

        progress = FrameProgress(600)
        body = progress.wrap(lambda i, state: run_frame(state, 10))
        state = jax.lax.fori_loop(0, 600, body, state)
    """

    def __init__(self, total: int, desc: Optional[str] = None, update_every: Optional[int] = None):
        self.total = total
        self.desc = desc or f"Emulating ({total:,} frames)"
        if update_every is None:
            update_every = min(total // 20, 50)
        self.update_every = max(1, min(update_every, total))
        self.frames_done = 0
        self._bar = None

    def _open(self):
        self.frames_done = 0
        self._bar = tqdm(total=self.total, desc=self.desc, unit="frame")

    def _advance(self, frames):
        self.frames_done += int(frames)
        if self._bar is not None:
            self._bar.update(int(frames))

    def _close(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def _callback(self, fn: Callable, *args):
        io_callback(fn, None, *args, ordered=True)

    def _before(self, frame):
        jax.lax.cond(frame == 0, lambda: self._callback(self._open), lambda: None)

    def _after(self, frame):
        completed = frame + 1
        tail = self.total % self.update_every
        jax.lax.cond(
            completed % self.update_every == 0,
            lambda: self._callback(self._advance, self.update_every),
            lambda: None,
        )
        if tail:
            jax.lax.cond(
                completed == self.total,
                lambda: self._callback(self._advance, tail),
                lambda: None,
            )
        jax.lax.cond(completed == self.total, lambda: self._callback(self._close), lambda: None)

    def wrap(self, body: Callable) -> Callable:
        """Return ``body`` with progress reporting around each frame."""
        def body_with_progress(frame, carry):
            self._before(frame)
            carry = body(frame, carry)
            self._after(frame)
            return carry

        return body_with_progress
