"""Non-blocking keyboard input for the interactive timer."""

import select
import sys
import termios
import tty
from typing import Optional


class KeyboardHandler:
    """Reads single keypresses from a terminal in cbreak mode.

    Keys keep their case: lower-case keys are the everyday controls and the
    upper-case ``D`` and ``B`` are the debug shortcuts.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self.old_settings = None
        self._setup()

    def _setup(self):
        """Switch the terminal to cbreak mode, remembering the old settings."""
        try:
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error:
            # Not a terminal (piped input); keys are still read, just buffered
            self.old_settings = None

    def get_key(self) -> Optional[str]:
        """Return the pending key, or None if nothing was pressed."""
        if select.select([self.stream], [], [], 0)[0]:
            key = self.stream.read(1)
            return key or None
        return None

    def stop(self):
        """Restore terminal settings."""
        if self.old_settings is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None
