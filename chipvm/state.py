"""CHIP-8 virtual machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from chipvm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS
)


class StackState(PyTreeNode):
    """Return address stack for subroutine calls.

    ``pointer`` is the index of the next free slot, so an empty stack has
    pointer 0 and a full one has pointer ``STACK_SIZE``.
    """
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: int = 0


class EmulatorState(PyTreeNode):
    """Complete CHIP-8 machine state.

    Instances are immutable; every instruction returns a new state built
    with ``replace``. The display is indexed ``[x, y]``.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    # FX1E sets VF when I leaves the 12-bit address space (Amiga interpreter behavior)
    index_overflow_flag: bool = field(pytree_node=False, default=False)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    index_overflow_flag: bool = False,
) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng, index_overflow_flag=index_overflow_flag)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))
