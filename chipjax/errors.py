"""CHIP-8 error types and fault codes."""

from enum import IntEnum


class Fault(IntEnum):
    """Fault codes recorded in ``EmulatorState.fault`` by jitted code."""
    NONE = 0
    DECODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3


class Chip8Error(Exception):
    """Base class for all emulator errors."""


class LoadError(Chip8Error):
    """Program could not be loaded; the machine is left untouched."""


class ProgramTooLargeError(LoadError):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Program is {size} bytes, at most {limit} bytes fit above 0x200")


class ProgramNotFoundError(LoadError):
    """Program source could not be read."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Could not read program from '{path}'")


class MachineFault(Chip8Error):
    """The running program hit a fatal condition and the machine halted."""
    fault = Fault.NONE

    def __init__(self, pc: int, message: str):
        self.pc = pc
        super().__init__(f"{message} (PC=0x{pc:03X})")


class DecodeError(MachineFault):
    """PC pointed past the last fetchable instruction (0xFFE)."""
    fault = Fault.DECODE

    def __init__(self, pc: int):
        super().__init__(pc, "Program counter outside fetchable memory")


class StackOverflowError(MachineFault):
    """A call was made with all 15 usable stack slots in use."""
    fault = Fault.STACK_OVERFLOW

    def __init__(self, pc: int):
        super().__init__(pc, "Subroutine call with a full stack (the 16th nested call; 15 fit)")


class StackUnderflowError(MachineFault):
    """A return was made with an empty stack."""
    fault = Fault.STACK_UNDERFLOW

    def __init__(self, pc: int):
        super().__init__(pc, "Return with an empty stack")


FAULT_ERRORS = {
    Fault.DECODE: DecodeError,
    Fault.STACK_OVERFLOW: StackOverflowError,
    Fault.STACK_UNDERFLOW: StackUnderflowError,
}


def fault_to_error(code: int, pc: int) -> MachineFault:
    """Build the exception matching a recorded fault code."""
    return FAULT_ERRORS[Fault(code)](pc)
