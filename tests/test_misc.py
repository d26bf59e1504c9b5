"""Tests for miscellaneous instructions (Fxxx)."""

import pytest
import jax.numpy as jnp
from chipvm import execute, UnknownOpcode, FONT_START
from chipvm.constants import FONT_DATA
from conftest import set_registers, setup_sprite_in_memory


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = fresh_state

        # Test FX15: Set delay timer
        state = execute(state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        # Test FX18: Set sound timer
        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        # Test FX07: Get delay timer
        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48

    def test_timers_are_independent(self, fresh_state):
        state = set_registers(fresh_state, V0=10)

        state = execute(state, 0xF018)

        assert state.sound_timer == 10
        assert state.delay_timer == 0

    def test_instructions_do_not_tick_timers(self, fresh_state):
        state = fresh_state.replace(delay_timer=jnp.uint8(5))

        state = execute(state, 0x6000)
        state = execute(state, 0xF107)

        assert state.delay_timer == 5
        assert state.V[1] == 5


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        """Test BCD conversion with 156."""
        state = fresh_state

        # Test with 156 (0x9C)
        state = execute(state, 0x609C)  # V0 = 156
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF033)  # BCD conversion

        assert state.memory[0x300] == 1  # Hundreds
        assert state.memory[0x301] == 5  # Tens
        assert state.memory[0x302] == 6  # Ones
        assert state.I == 0x300

    @pytest.mark.parametrize("value,digits", [(0, [0, 0, 0]), (7, [0, 0, 7]), (42, [0, 4, 2]), (255, [2, 5, 5])])
    def test_bcd_edge_cases(self, fresh_state, value, digits):
        """Test BCD with edge cases."""
        state = set_registers(fresh_state, V3=value)
        state = execute(state, 0xA400)

        state = execute(state, 0xF333)

        assert [int(d) for d in state.memory[0x400:0x403]] == digits


class TestFont:
    """Test font character addressing."""

    def test_misc_font_character(self, fresh_state):
        """Test font character addressing."""
        state = fresh_state

        # Test character 'A' (0xA)
        state = execute(state, 0x600A)  # V0 = 0xA
        state = execute(state, 0xF029)  # I = font address for A

        expected_address = 0x50 + (0xA * 5)  # 0x50 + 50 = 0x82
        assert state.I == expected_address

    @pytest.mark.parametrize("digit", range(16))
    def test_font_all_characters(self, fresh_state, digit):
        """Glyph address points at the glyph bytes for every hex digit."""
        state = execute(fresh_state, 0x6000 | digit)  # V0 = digit

        state = execute(state, 0xF029)  # I = font address

        assert state.I == FONT_START + digit * 5
        glyph = [int(b) for b in state.memory[int(state.I):int(state.I) + 5]]
        assert glyph == FONT_DATA[digit * 5:digit * 5 + 5]


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_registers(self, fresh_state):
        """FX55 / FX65 round trip; I does not change."""
        state = fresh_state

        # Set up test data
        state = execute(state, 0x6001)  # V0 = 1
        state = execute(state, 0x6102)  # V1 = 2
        state = execute(state, 0x6203)  # V2 = 3
        state = execute(state, 0xA300)  # I = 0x300

        original_i = state.I

        # Store registers
        state = execute(state, 0xF255)  # Store V0-V2
        assert state.I == original_i
        assert [int(b) for b in state.memory[0x300:0x303]] == [1, 2, 3]

        # Clear registers
        state = execute(state, 0x6000)  # V0 = 0
        state = execute(state, 0x6100)  # V1 = 0
        state = execute(state, 0x6200)  # V2 = 0

        # Load back
        state = execute(state, 0xF265)  # Load V0-V2
        assert state.V[0] == 1
        assert state.V[1] == 2
        assert state.V[2] == 3
        assert state.I == original_i

    def test_store_stops_at_x(self, fresh_state):
        """FX55 - Memory past I+X is untouched."""
        state = set_registers(fresh_state, V0=0x11, V1=0x22, V2=0x33)
        state = setup_sprite_in_memory(state, 0x400, [0xEE] * 4)
        state = execute(state, 0xA400)

        state = execute(state, 0xF155)

        assert [int(b) for b in state.memory[0x400:0x404]] == [0x11, 0x22, 0xEE, 0xEE]

    def test_load_stops_at_x(self, fresh_state):
        """FX65 - Registers past VX are untouched."""
        state = set_registers(fresh_state, V2=0x99)
        state = setup_sprite_in_memory(state, 0x400, [0x01, 0x02, 0x03])
        state = execute(state, 0xA400)

        state = execute(state, 0xF165)

        assert state.V[0] == 0x01
        assert state.V[1] == 0x02
        assert state.V[2] == 0x99

    def test_store_all_registers(self, fresh_state):
        """FXF55 with X = F includes VF."""
        state = fresh_state.replace(V=jnp.arange(16, dtype=jnp.uint8) + 1)
        state = execute(state, 0xA500)

        state = execute(state, 0xFF55)

        assert [int(b) for b in state.memory[0x500:0x510]] == list(range(1, 17))


class TestKeypad:
    """Test keypad operations."""

    def test_skip_if_key_pressed(self, fresh_state):
        """Test EX9E - Skip if key pressed."""
        state = fresh_state

        # Set V0 = 5 and press key 5
        state = execute(state, 0x6005)  # V0 = 5
        state = state.replace(keypad=state.keypad.at[5].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)  # Skip if key V0 pressed
        assert state.pc == initial_pc + 2  # Should skip

    def test_no_skip_if_other_key_pressed(self, fresh_state):
        state = execute(fresh_state, 0x6005)
        state = state.replace(keypad=state.keypad.at[6].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE09E)
        assert state.pc == initial_pc

    def test_skip_if_key_not_pressed(self, fresh_state):
        """Test EXA1 - Skip if key not pressed."""
        state = fresh_state

        # Set V0 = 5 and don't press key 5
        state = execute(state, 0x6005)  # V0 = 5
        initial_pc = state.pc

        state = execute(state, 0xE0A1)  # Skip if key V0 not pressed
        assert state.pc == initial_pc + 2  # Should skip

    def test_no_skip_if_key_held(self, fresh_state):
        state = execute(fresh_state, 0x600F)
        state = state.replace(keypad=state.keypad.at[0xF].set(True))
        initial_pc = state.pc

        state = execute(state, 0xE0A1)
        assert state.pc == initial_pc

    def test_wait_for_key_blocking(self, fresh_state):
        """Test FX0A - Wait for key (blocking behavior)."""
        state = fresh_state
        initial_pc = state.pc

        # Execute wait instruction with no key pressed
        state = execute(state, 0xF00A)  # Wait for key → V0

        # PC should be decremented (instruction repeats)
        assert state.pc == initial_pc - 2

    def test_wait_for_key_press(self, fresh_state):
        """Test FX0A - Wait for key (key press behavior)."""
        state = fresh_state

        # Press key 7
        state = state.replace(keypad=state.keypad.at[7].set(True))
        initial_pc = state.pc

        state = execute(state, 0xF30A)  # Wait for key → V3

        # Should store pressed key and continue
        assert state.V[3] == 7
        assert state.pc == initial_pc  # PC not decremented

    def test_wait_for_key_lowest_index(self, fresh_state):
        state = fresh_state.replace(keypad=fresh_state.keypad.at[0xC].set(True).at[0x9].set(True))

        state = execute(state, 0xF00A)

        assert state.V[0] == 0x9


class TestMiscInstructionDispatch:
    """Test misc instruction dispatch logic."""

    def test_add_to_index(self, fresh_state):
        """Test FX1E - Add VX to I register."""
        state = fresh_state

        state = execute(state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF01E)  # I += V0

        assert state.I == 0x310
        assert state.V[15] == 0

    def test_add_to_index_leaves_flag_by_default(self, fresh_state):
        """FX1E - Past 0xFFF, I keeps 16 bits and VF is untouched."""
        state = set_registers(fresh_state, V0=0xFF, VF=0x05)
        state = execute(state, 0xAF80)  # I = 0xF80

        state = execute(state, 0xF01E)  # I += V0

        assert state.I == 0x107F
        assert state.V[15] == 0x05

    def test_add_to_index_overflow_flag(self, overflow_flag_state):
        """FX1E with the overflow quirk reports leaving 12-bit space in VF."""
        state = execute(overflow_flag_state, 0x60FF)  # V0 = 0xFF
        state = execute(state, 0xAF80)  # I = 0xF80
        state = execute(state, 0xF01E)  # I += V0

        assert state.I == 0x107F
        assert state.V[15] == 1

        state = execute(state, 0xA100)
        state = execute(state, 0xF01E)
        assert state.V[15] == 0

    @pytest.mark.parametrize("instruction", [0xF000, 0xF0FF, 0xF130, 0xF566])
    def test_unknown_misc_instruction(self, fresh_state, instruction):
        with pytest.raises(UnknownOpcode):
            execute(fresh_state, instruction)

    @pytest.mark.parametrize("instruction", [0xE000, 0xE09F, 0xE0FF])
    def test_unknown_key_instruction(self, fresh_state, instruction):
        with pytest.raises(UnknownOpcode):
            execute(fresh_state, instruction)
