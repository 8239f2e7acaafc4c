"""CHIP-8 control flow instructions."""

from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction
from chipjax.errors import Fault
from chipjax.stack import push
from chipjax.constants import NUM_KEYS
from chipjax.instructions.common import as_u16, raise_fault, skip_if


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=as_u16(instruction.nnn))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    stack, overflow = push(state.stack, state.pc)
    state = execute_jump(state.replace(stack=stack), instruction)
    return raise_fault(state, overflow, Fault.STACK_OVERFLOW)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        return skip_if(state, condition_fn(state, instruction))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

# Key index is taken from the low nibble of VX.
execute_skip_if_key_down = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] % NUM_KEYS]
)

execute_skip_if_key_up = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] % NUM_KEYS]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    return state.replace(pc=as_u16(instruction.nnn + state.V[0]))
