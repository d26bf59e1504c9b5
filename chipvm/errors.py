"""CHIP-8 virtual machine errors."""


class VMError(Exception):
    """Base class for errors raised by the virtual machine."""
    pass


class LoadError(VMError):
    """Program image is too large or cannot be read."""
    pass


class UnknownOpcode(VMError):
    """Instruction word matches no known pattern in its family."""

    def __init__(self, opcode: int, pc: int | None = None):
        self.opcode = opcode
        self.pc = pc
        message = f"Unknown opcode 0x{opcode:04X}"
        if pc is not None:
            message += f" at 0x{pc:03X}"
        super().__init__(message)


class StackError(VMError):
    """Call stack misuse."""
    pass


class StackOverflow(StackError):
    pass


class StackUnderflow(StackError):
    pass
