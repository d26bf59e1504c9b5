from typing import Optional

import jax
import numpy as np
from tqdm import tqdm

from chipvm.constants import TIMER_FREQUENCY
from chipvm.emulator import step, tick_timers, set_key, set_keypad, load_program, read_rom
from chipvm.errors import VMError
from chipvm.logging import (
    ConsoleLogger, ConsoleTraceCallback, RecordingTraceCallback, CompositeTraceCallback
)
from chipvm.rendering import chip8_display_to_rgb, create_color_scheme
from chipvm.state import EmulatorState, create_state


class Chip8Machine:
    """Host-side driver around the CHIP-8 virtual machine.

    Owns the current ``EmulatorState`` and plays the role of the frame clock:
    each call to ``run_frame`` executes the instructions that fit in one
    60 Hz frame, then decrements the timers once. Input and rendering
    adapters read and write the state between frames only.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": TIMER_FREQUENCY}

    def __init__(
        self,
        program: Optional[bytes] = None,
        rom_path: Optional[str] = None,
        instruction_frequency: int = 700,
        fps: int = TIMER_FREQUENCY,
        seed: int = 0,
        index_overflow_flag: bool = False,
        trace: bool = False,
        history_size: int = 32,
        logger: Optional[ConsoleLogger] = None,
        render_scale: int = 8,
        color_scheme: str = "classic",
    ):
        """Initialize the machine and load the program.

        Args:
            program: Program image bytes
            rom_path: Path of a ROM file to read instead of ``program``
            instruction_frequency: CHIP-8 CPU frequency in Hz (typically 700)
            fps: Frame and timer rate (typically 60)
            seed: Seed for the random number generator used by CXNN
            index_overflow_flag: Whether FX1E reports I overflow in VF
            trace: Log every executed instruction at DEBUG level
            history_size: Number of recent instructions kept for error reports
            logger: Console logger, a default one is created if omitted
            render_scale: Upscaling factor for rendered frames (default: 8x)
            color_scheme: Color scheme for rendering ("classic", "amber", "white", "blue", "retro")
        """
        if program is not None and rom_path is not None:
            raise ValueError("Pass either 'program' or 'rom_path', not both")
        if instruction_frequency <= 0 or fps <= 0:
            raise ValueError("'instruction_frequency' and 'fps' must be positive")

        self.logger = logger or ConsoleLogger()
        self.instruction_frequency = instruction_frequency
        self.fps = fps
        self.seed = seed
        self.index_overflow_flag = index_overflow_flag
        self.render_scale = render_scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)

        self.history = RecordingTraceCallback(max_entries=history_size)
        callbacks = [self.history]
        if trace:
            callbacks.append(ConsoleTraceCallback(self.logger, show_registers=True))
        self.trace = CompositeTraceCallback(callbacks)

        if rom_path is not None:
            program = read_rom(rom_path)
            self.logger.info(f"Loaded ROM '{rom_path}' ({len(program)} bytes)")
        self.rom_data = bytes(program) if program is not None else b""

        self.state: EmulatorState = self.reset()

    @property
    def instructions_per_frame(self) -> int:
        """Number of CHIP-8 instructions executed between two timer ticks."""
        return max(1, self.instruction_frequency // self.fps)

    @property
    def sound_active(self) -> bool:
        """Whether the host should currently be beeping."""
        return int(self.state.sound_timer) > 0

    def reset(self) -> EmulatorState:
        """Recreate the machine state from the stored program image."""
        state = create_state(jax.random.PRNGKey(self.seed), index_overflow_flag=self.index_overflow_flag)
        self.state = load_program(state, self.rom_data)
        self.frame_count = 0
        self.instruction_count = 0
        self.history.entries.clear()
        self.logger.debug(
            f"Machine reset: {len(self.rom_data)} byte program, "
            f"{self.instructions_per_frame} instructions per frame"
        )
        return self.state

    def press_key(self, key: int):
        self.state = set_key(self.state, key, True)

    def release_key(self, key: int):
        self.state = set_key(self.state, key, False)

    def set_keypad(self, keys):
        self.state = set_keypad(self.state, keys)

    def run_frame(self) -> EmulatorState:
        """Execute one frame worth of instructions, then tick the timers.

        Raises:
            VMError: after logging the fault and the recent instruction history.
        """
        state = self.state
        try:
            for _ in range(self.instructions_per_frame):
                state = step(state, self.trace)
                self.instruction_count += 1
        except VMError as error:
            self.state = state
            self.logger.error(f"Machine halted after {self.instruction_count} instructions: {error}")
            self.history.dump(self.logger)
            raise
        self.state = tick_timers(state)
        self.frame_count += 1
        return self.state

    def run(self, num_frames: int, progress: bool = False) -> EmulatorState:
        """Run ``num_frames`` frames back to back, without real-time pacing."""
        frames = range(num_frames)
        if progress:
            frames = tqdm(frames, desc="Running", unit="frame")
        for _ in frames:
            self.run_frame()
        return self.state

    def render(self) -> np.ndarray:
        """Render the current framebuffer as an RGB array."""
        return chip8_display_to_rgb(
            self.state.display,
            scale=self.render_scale,
            on_color=self.on_color,
            off_color=self.off_color,
        )
