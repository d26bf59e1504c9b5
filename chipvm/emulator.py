"""Main CHIP-8 emulator execution engine."""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction, decode
from chipvm.constants import PROGRAM_START, MAX_PROGRAM_SIZE, ADDRESS_MASK, NUM_KEYS
from chipvm.errors import LoadError, UnknownOpcode
from chipvm.instructions.system import no_op, execute_clear_screen, execute_return
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipvm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    "SYS": no_op,
    "CLS": execute_clear_screen,
    "RET": execute_return,
    "JP": execute_jump,
    "CALL": execute_call,
    "SE_BYTE": execute_skip_if_equal_immediate,
    "SNE_BYTE": execute_skip_if_not_equal_immediate,
    "SE_REG": execute_skip_if_equal_register,
    "LD_BYTE": execute_set,
    "ADD_BYTE": execute_add,
    "LD_REG": execute_alu_set,
    "OR": execute_alu_or,
    "AND": execute_alu_and,
    "XOR": execute_alu_xor,
    "ADD_REG": execute_alu_add,
    "SUB": execute_alu_sub_xy,
    "SHR": execute_alu_shift_right,
    "SUBN": execute_alu_sub_yx,
    "SHL": execute_alu_shift_left,
    "SNE_REG": execute_skip_if_not_equal_register,
    "LD_I": execute_set_index,
    "JP_V0": execute_jump_with_offset,
    "RND": execute_random,
    "DRW": execute_display,
    "SKP": execute_skip_if_key_pressed,
    "SKNP": execute_skip_if_key_not_pressed,
    "LD_VX_DT": execute_get_delay_timer,
    "LD_VX_K": execute_wait_for_key,
    "LD_DT_VX": execute_set_delay_timer,
    "LD_ST_VX": execute_set_sound_timer,
    "ADD_I": execute_add_to_index,
    "LD_F": execute_font_character,
    "LD_B": execute_bcd_conversion,
    "LD_I_VX": execute_store_registers,
    "LD_VX_I": execute_load_registers,
}


def execute(state: EmulatorState, instruction: int | DecodedInstruction) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    ``instruction`` is either a raw 16-bit word or an already decoded
    instruction. The program counter is not advanced here; ``fetch`` does it.
    """
    if not isinstance(instruction, DecodedInstruction):
        instruction = decode(instruction)
    return HANDLERS[instruction.mnemonic](state, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC past it."""
    pc = jnp.astype(state.pc, jnp.int32)
    instruction = _pack_u16(state.memory[pc & ADDRESS_MASK], state.memory[(pc + 1) & ADDRESS_MASK])
    return state.replace(pc=state.pc + 2), instruction


def step(state: EmulatorState, trace=None) -> EmulatorState:
    """Fetch, decode and execute one instruction.

    Args:
        state: Current machine state
        trace: Optional ``TraceCallback`` notified after the instruction ran

    Raises:
        UnknownOpcode: with the address of the offending instruction.
        StackOverflow, StackUnderflow: on call stack misuse.
    """
    pc = int(state.pc)
    state, instruction = fetch(state)
    try:
        decoded = decode(instruction)
    except UnknownOpcode as error:
        raise UnknownOpcode(error.opcode, pc) from None
    state = execute(state, decoded)
    if trace is not None:
        trace.on_step(pc, decoded, state)
    return state


def run(state: EmulatorState, num_steps: int, trace=None) -> EmulatorState:
    """Execute ``num_steps`` consecutive steps."""
    for _ in range(num_steps):
        state = step(state, trace)
    return state


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers once, stopping at zero.

    Called by the host at 60 Hz, independently of instruction execution.
    """
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def set_key(state: EmulatorState, key: int, pressed: bool) -> EmulatorState:
    """Record a single key transition reported by the host."""
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be in [0, {NUM_KEYS}), got {key}")
    return state.replace(keypad=state.keypad.at[key].set(bool(pressed)))


def set_keypad(state: EmulatorState, keys) -> EmulatorState:
    """Replace the whole keypad with 16 boolean flags."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Load a program image into CHIP-8 memory starting at 0x200."""
    if not isinstance(program, (bytes, bytearray, memoryview)):
        raise LoadError(f"Program image must be bytes, got {type(program).__name__}")
    rom_data = bytes(program)
    if len(rom_data) > MAX_PROGRAM_SIZE:
        raise LoadError(
            f"Program image is {len(rom_data)} bytes, maximum is {MAX_PROGRAM_SIZE}"
        )
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def read_rom(filename: str) -> bytes:
    """Read a ROM file, reporting I/O failures as ``LoadError``."""
    try:
        with open(filename, 'rb') as f:
            return f.read()
    except OSError as error:
        raise LoadError(f"Cannot read ROM '{filename}': {error}") from error


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    return load_program(state, read_rom(filename))
