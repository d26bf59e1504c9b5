"""
CHIP-8 frontend: pygame window, or headless runner with --headless
"""

import argparse
import sys

from chipvm import Chip8Machine, VMError, display_to_text
from chipvm.logging import ConsoleLogger

# Host keyboard layout
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
KEY_LAYOUT = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def run_window(machine: Chip8Machine, logger: ConsoleLogger, scale: int = 8):
    """Interactive loop paced at the machine frame rate."""
    import pygame

    key_map = {pygame.key.key_code(name): key for name, key in KEY_LAYOUT.items()}

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption("CHIP-8")
    clock = pygame.time.Clock()
    paused = False

    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset")

    try:
        running = True
        while running:
            clock.tick(machine.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                        logger.info("Paused" if paused else "Resumed")
                    elif event.key == pygame.K_F5:
                        machine.reset()
                        logger.info("Reset")
                    elif event.key in key_map:
                        machine.press_key(key_map[event.key])
                elif event.type == pygame.KEYUP and event.key in key_map:
                    machine.release_key(key_map[event.key])

            if not paused:
                machine.run_frame()

            frame = machine.render()
            surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
            screen.blit(pygame.transform.scale(surface, screen.get_size()), (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()


def run_headless(machine: Chip8Machine, logger: ConsoleLogger, num_frames: int):
    """Run a fixed number of frames and print the final screen."""
    machine.run(num_frames, progress=True)
    logger.info(
        f"Ran {machine.frame_count} frames, {machine.instruction_count} instructions, "
        f"PC=0x{int(machine.state.pc):03X}"
    )
    for line in display_to_text(machine.state.display):
        print(line)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program")
    parser.add_argument("rom", type=str, help="Path of the CHIP-8 ROM file")
    parser.add_argument(
        "--ipf",
        type=int,
        default=None,
        help="Instructions per frame (default: 700 Hz / 60 FPS)",
    )
    parser.add_argument("--scale", type=int, default=8, help="Window scale factor (default: 8)")
    parser.add_argument(
        "--color_scheme",
        type=str,
        default="classic",
        help="Color scheme: classic, amber, white, blue, retro (default: classic)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--headless", action="store_true", help="Run without a window")
    parser.add_argument(
        "--frames",
        type=int,
        default=600,
        help="Number of frames to run in headless mode (default: 600)",
    )
    parser.add_argument("--trace", action="store_true", help="Log every executed instruction")
    parser.add_argument("--log_level", type=str, default="INFO", help="Console log level (default: INFO)")
    args = parser.parse_args(argv)

    logger = ConsoleLogger(log_level="DEBUG" if args.trace else args.log_level)
    frequency = args.ipf * 60 if args.ipf else 700

    try:
        machine = Chip8Machine(
            rom_path=args.rom,
            instruction_frequency=frequency,
            seed=args.seed,
            trace=args.trace,
            logger=logger,
            render_scale=1,
            color_scheme=args.color_scheme,
        )
        if args.headless:
            run_headless(machine, logger, args.frames)
        else:
            run_window(machine, logger, scale=args.scale)
    except VMError as error:
        logger.critical(str(error))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
