"""Non-blocking keyboard input for the live timer."""

import select
import sys
import termios
import tty


class KeyboardHandler:
    """Reads single keypresses from a POSIX terminal without blocking."""

    def __init__(self):
        self.fd: int | None = None
        self.old_settings = None
        self._setup()

    def _setup(self):
        """Put the terminal in cbreak mode."""
        try:
            self.fd = sys.stdin.fileno()
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except (OSError, ValueError, termios.error):
            # stdin is not a terminal (piped input, tests)
            self.old_settings = None

    def get_key(self) -> str | None:
        """Return the lowercased key pressed, or None."""
        if self.old_settings is None:
            return None
        if select.select([sys.stdin], [], [], 0)[0]:
            return sys.stdin.read(1).lower()
        return None

    def stop(self):
        """Restore terminal settings."""
        if self.old_settings:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None
