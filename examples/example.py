import time

from chipvm import Chip8Machine, display_to_text
from chipvm.logging import ConsoleLogger

# Draws the hex digits 0-7 across the screen, then spins on a jump to self
PROGRAM = bytes([
    0x60, 0x00,  # 0x200: LD V0, 0x00      digit
    0x61, 0x02,  # 0x202: LD V1, 0x02      x
    0x62, 0x04,  # 0x204: LD V2, 0x04      y
    0xF0, 0x29,  # 0x206: LD F, V0
    0xD1, 0x25,  # 0x208: DRW V1, V2, 5
    0x70, 0x01,  # 0x20A: ADD V0, 0x01
    0x71, 0x06,  # 0x20C: ADD V1, 0x06
    0x30, 0x08,  # 0x20E: SE V0, 0x08
    0x12, 0x06,  # 0x210: JP 0x206
    0x12, 0x12,  # 0x212: JP 0x212
])


if __name__ == "__main__":
    machine = Chip8Machine(program=PROGRAM, trace=True, logger=ConsoleLogger(log_level="DEBUG"))

    start = time.time()
    machine.run(10)
    elapsed = time.time() - start

    for line in display_to_text(machine.state.display)[:12]:
        print(line)
    print(f"{machine.instruction_count} instructions in {elapsed:.2f}s")
