"""Headless CHIP-8 runner.

Usage::

    chipjax rom=roms/pong.ch8 frames=300 hold_keys=[5] screenshot=pong.png
"""

import hydra
import jax
from omegaconf import DictConfig, OmegaConf

from chipjax import emulator
from chipjax.config import MachineConfig
from chipjax.errors import Chip8Error, fault_to_error
from chipjax.logging import EmulatorLogger, FrameProgress
from chipjax.machine import Chip8
from chipjax.rendering import display_to_text, save_screenshot


def run(cfg: DictConfig) -> Chip8:
    """Load ``cfg.rom``, run ``cfg.frames`` frames and report the display."""
    logger = EmulatorLogger(log_level=cfg.log_level)
    machine_cfg = MachineConfig(**OmegaConf.to_container(cfg.machine))
    machine = Chip8(config=machine_cfg, logger=logger)

    try:
        machine.load_rom(cfg.rom)
    except Chip8Error as e:
        logger.error(str(e))
        raise

    for key in cfg.hold_keys:
        machine.set_key(key, True)

    instructions_per_tick = machine_cfg.instructions_per_tick
    frames = cfg.frames

    def body(_, state):
        return emulator.run_frame(state, instructions_per_tick)

    if cfg.progress and frames > 0:
        body = FrameProgress(frames, desc=f"Emulating {cfg.rom}").wrap(body)

    machine.state = jax.jit(lambda s: jax.lax.fori_loop(0, frames, body, s))(machine.state)

    if machine.halted:
        error = fault_to_error(int(machine.state.fault), machine.pc)
        logger.log_fault(error, machine.state)
        raise error

    logger.log_run(frames, instructions_per_tick, machine.state)
    logger.log_registers(machine.state)

    if cfg.ascii:
        print(display_to_text(machine.display))
    if cfg.screenshot:
        save_screenshot(machine.display, cfg.screenshot, cfg.scale, cfg.color_scheme)
        logger.info(f"Screenshot saved: {cfg.screenshot}")

    return machine


@hydra.main(version_base=None, config_name="config")
def main(cfg: DictConfig) -> None:
    run(cfg)


if __name__ == "__main__":
    main()
