"""Tests for rendering utilities."""

import numpy as np
import pytest
from chipvm import chip8_display_to_rgb, create_color_scheme, display_to_text, execute


def test_display_to_rgb_orientation(fresh_state):
    display = fresh_state.display.at[63, 0].set(True)

    frame = chip8_display_to_rgb(display, scale=1)

    assert frame.shape == (32, 64, 3)
    assert frame.dtype == np.uint8
    assert tuple(frame[0, 63]) == (0, 255, 0)
    assert tuple(frame[0, 0]) == (0, 0, 0)


def test_display_to_rgb_scaling(fresh_state):
    display = fresh_state.display.at[1, 0].set(True)

    frame = chip8_display_to_rgb(display, scale=4, on_color=(255, 255, 255))

    assert frame.shape == (128, 256, 3)
    assert (frame[0:4, 4:8] == 255).all()
    assert (frame[0:4, 0:4] == 0).all()


def test_display_to_rgb_invalid_scale(fresh_state):
    with pytest.raises(ValueError):
        chip8_display_to_rgb(fresh_state.display, scale=0)


def test_color_schemes():
    on_color, off_color = create_color_scheme("amber")
    assert on_color == (255, 176, 0)
    assert off_color == (0, 0, 0)

    with pytest.raises(ValueError):
        create_color_scheme("plaid")


def test_display_to_text(fresh_state):
    state = execute(fresh_state, 0xA050)  # Glyph '0'
    state = execute(state, 0xD005)

    lines = display_to_text(state.display)

    assert len(lines) == 32
    assert all(len(line) == 64 for line in lines)
    assert lines[0].startswith("####.")
    assert lines[1].startswith("#..#.")
    assert lines[5] == "." * 64
