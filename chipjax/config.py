"""Structured configuration for the emulator and the headless runner."""

from dataclasses import dataclass, field
from typing import List, Optional

from hydra.core.config_store import ConfigStore
from omegaconf import MISSING

from chipjax.constants import DEFAULT_INSTRUCTIONS_PER_TICK, DEFAULT_TIMER_HZ


@dataclass
class MachineConfig:
    """Machine policy chosen by the host.

    Attributes:
        seed: Initial random generator state; wall clock when None
        instructions_per_tick: Instructions executed per timer tick
        timer_hz: Timer tick frequency the host is expected to drive
    """
    seed: Optional[int] = None
    instructions_per_tick: int = DEFAULT_INSTRUCTIONS_PER_TICK
    timer_hz: int = DEFAULT_TIMER_HZ


@dataclass
class RunConfig:
    """Headless run of a single ROM."""
    rom: str = MISSING
    frames: int = 600
    hold_keys: List[int] = field(default_factory=list)
    ascii: bool = True
    screenshot: Optional[str] = None
    scale: int = 8
    color_scheme: str = "lavender"
    log_level: str = "INFO"
    progress: bool = True
    machine: MachineConfig = field(default_factory=MachineConfig)


cs = ConfigStore.instance()
cs.store(name="config", node=RunConfig)
