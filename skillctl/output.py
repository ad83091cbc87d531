"""Console output for skillctl.

All user-facing text goes through :func:`message`, which filters by the
configured verbosity and applies colour when the terminal supports it.
"""

import sys
from enum import Enum, IntEnum


class MessageType(Enum):
    """Kind of message, used to pick colour and output stream."""

    NORMAL = "normal"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


class VerbosityLevel(IntEnum):
    """Minimum ``-v`` count required for a message to be shown."""

    ALWAYS = 0
    VERBOSE = 1
    EXTRA_VERBOSE = 2
    DEBUG = 3


class OutputManager:
    """Holds output settings for the running command."""

    COLORS = {
        MessageType.NORMAL: "",
        MessageType.INFO: "\033[36m",
        MessageType.SUCCESS: "\033[32m",
        MessageType.WARNING: "\033[33m",
        MessageType.ERROR: "\033[31m",
        MessageType.DEBUG: "\033[2m",
    }
    RESET = "\033[0m"

    def __init__(self, verbosity: int = 0, use_color: bool = False):
        self.verbosity = verbosity
        self.use_color = use_color

    def should_show(self, verbosity: VerbosityLevel) -> bool:
        return self.verbosity >= verbosity

    def format(self, text: str, msg_type: MessageType) -> str:
        """Wrap *text* in the colour for *msg_type* if colour is enabled."""
        color = self.COLORS.get(msg_type, "")
        if not self.use_color or not color or not text:
            return text
        return f"{color}{text}{self.RESET}"

    def message(
        self,
        text: str,
        msg_type: MessageType = MessageType.NORMAL,
        verbosity: VerbosityLevel = VerbosityLevel.ALWAYS,
    ) -> None:
        if not self.should_show(verbosity):
            return
        stream = sys.stderr if msg_type in (MessageType.WARNING, MessageType.ERROR) else sys.stdout
        print(self.format(text, msg_type), file=stream)


_output: OutputManager | None = None


def get_output() -> OutputManager:
    """Return the process-wide output manager, creating it on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def message(
    text: str,
    msg_type: MessageType = MessageType.NORMAL,
    verbosity: VerbosityLevel = VerbosityLevel.ALWAYS,
) -> None:
    """Print *text* through the shared output manager."""
    get_output().message(text, msg_type, verbosity)
