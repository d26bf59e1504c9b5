"""Console logging utilities for the CHIP-8 virtual machine.

This module provides a small leveled console logger and trace callbacks that
the execution engine notifies after every instruction. Tracing is opt-in:
``step`` only calls a callback when one is passed.
"""

import time
import sys
from collections import deque
from typing import Any, List, Optional, Tuple

from chipvm.decode import DecodedInstruction


class ConsoleLogger:
    """Flexible console logger with level filtering and colors."""

    def __init__(
        self,
        name: str = "chipvm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }
        if self.log_level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order.keys())}"
            )

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def is_enabled_for(self, level: str) -> bool:
        return self._should_log(level)

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


def format_registers(state: Any) -> str:
    """One-line register dump: ``V0=00 V1=0A ... I=0x300``."""
    registers = " ".join(f"V{i:X}={int(value):02X}" for i, value in enumerate(state.V))
    return f"{registers} I=0x{int(state.I):03X}"


class TraceCallback:
    """Base class for per-instruction trace callbacks."""

    def on_step(self, pc: int, instruction: DecodedInstruction, state: Any = None):
        """Called after the instruction fetched from ``pc`` was executed."""
        pass


class ConsoleTraceCallback(TraceCallback):
    """Writes every executed instruction to a console logger at DEBUG level."""

    def __init__(self, logger: Optional[ConsoleLogger] = None, show_registers: bool = False):
        self.logger = logger or ConsoleLogger(name="trace", log_level="DEBUG")
        self.show_registers = show_registers

    def on_step(self, pc: int, instruction: DecodedInstruction, state: Any = None):
        if not self.logger.is_enabled_for("DEBUG"):
            return
        message = f"0x{pc:03X}: {instruction.raw:04X} {instruction.describe()}"
        if self.show_registers and state is not None:
            message = f"{message:<36s} {format_registers(state)}"
        self.logger.debug(message)


class RecordingTraceCallback(TraceCallback):
    """Keeps the most recent executed instructions in memory."""

    def __init__(self, max_entries: Optional[int] = 1024):
        self.entries = deque(maxlen=max_entries)

    def on_step(self, pc: int, instruction: DecodedInstruction, state: Any = None):
        self.entries.append((pc, instruction.raw, instruction.mnemonic))

    @property
    def mnemonics(self) -> List[str]:
        return [entry[2] for entry in self.entries]

    def last(self, count: int = 10) -> List[Tuple[int, int, str]]:
        """Return the ``count`` most recent entries, oldest first."""
        return list(self.entries)[-count:]

    def dump(self, logger: ConsoleLogger, count: int = 10):
        """Log the most recent entries, e.g. after a fatal error."""
        for pc, raw, mnemonic in self.last(count):
            logger.error(f"  0x{pc:03X}: {raw:04X} {mnemonic}")


class CompositeTraceCallback(TraceCallback):
    """Fans a step notification out to several callbacks."""

    def __init__(self, callbacks: List[TraceCallback]):
        self.callbacks = list(callbacks)

    def on_step(self, pc: int, instruction: DecodedInstruction, state: Any = None):
        for callback in self.callbacks:
            callback.on_step(pc, instruction, state)
