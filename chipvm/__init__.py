"""CHIP-8 virtual machine package."""

from chipvm.state import EmulatorState, StackState, create_state
from chipvm.emulator import (
    execute, fetch, step, run, tick_timers, set_key, set_keypad, load_program, load_rom
)
from chipvm.decode import DecodedInstruction, decode
from chipvm.errors import VMError, LoadError, UnknownOpcode, StackError, StackOverflow, StackUnderflow
from chipvm.constants import *
from chipvm.rendering import chip8_display_to_rgb, create_color_scheme, display_to_text
from chipvm.machine import Chip8Machine

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run",
    "tick_timers",
    "set_key",
    "set_keypad",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "VMError",
    "LoadError",
    "UnknownOpcode",
    "StackError",
    "StackOverflow",
    "StackUnderflow",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "MAX_PROGRAM_SIZE",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "display_to_text",
    "Chip8Machine",
]
