"""CHIP-8 ALU operations (8xxx).

Each ALU function takes the operand values ``(vx, vy)`` and returns
``(result, flag)``. ``flag`` is ``None`` for operations that leave VF alone;
otherwise it is exactly 0 or 1 and is written to VF after the result, so a
flag always wins when VF is also the destination.
"""

import jax.numpy as jnp
from chipvm.state import EmulatorState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, flag is 1 when no borrow occurs."""
    not_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - jnp.astype(vy, jnp.int32)) & 0xFF
    return jnp.astype(result, jnp.uint8), not_borrow


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, flag is the bit shifted out."""
    shifted_bit = jnp.astype(vx & 1, jnp.uint8)
    return jnp.astype(vx >> 1, jnp.uint8), shifted_bit


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, flag is 1 when no borrow occurs."""
    not_borrow = jnp.astype(vy >= vx, jnp.uint8)
    result = (jnp.astype(vy, jnp.int32) - jnp.astype(vx, jnp.int32)) & 0xFF
    return jnp.astype(result, jnp.uint8), not_borrow


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, flag is the bit shifted out."""
    shifted_bit = jnp.astype((vx >> 7) & 1, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) << 1) & 0xFF
    return jnp.astype(result, jnp.uint8), shifted_bit


def make_alu_instruction(alu_fn):
    """Wrap an ALU function as an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        new_V = state.V.at[instruction.x].set(result)
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(flag)
        return state.replace(V=new_V)
    alu_instruction.__name__ = f"execute_{alu_fn.__name__}"
    alu_instruction.__doc__ = alu_fn.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
