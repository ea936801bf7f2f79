"""Action logger with secret masking.

One ActionLogger is built per run from the configuration and handed to every
component that reports to the user. Warnings, errors and failures are written
as GitHub Actions workflow commands so the runner turns them into
annotations; everything goes through mask_secrets first.

The logger remembers which values it has masked, so a token that leaked once
next to its key (``TICSAUTHTOKEN=abc``) is also hidden when it later shows up
on its own.
"""

from __future__ import annotations

import re
import sys

from rich.console import Console

MASK = "***"


def _escape_command_data(message: str) -> str:
    # workflow commands are line based; newlines must be encoded
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionLogger:
    def __init__(self, secrets_filter: list[str] | None = None, debug: bool = False, console: Console | None = None):
        self.secrets_filter = list(secrets_filter or [])
        self.debug_enabled = debug
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.matched: list[str] = []
        self.failed = False
        self._called: str | None = None

    # ------------------------------------------------------------------ #
    # Levels                                                               #
    # ------------------------------------------------------------------ #

    def header(self, message: str) -> None:
        message = self.mask_secrets(message)
        if self._called:
            self.console.print()
        self.console.print(message, style="bold blue", markup=False)
        self._called = "header"

    def info(self, message: str) -> None:
        self.console.print(self.mask_secrets(message), markup=False)
        self._called = "info"

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self.console.print(f"::debug::{_escape_command_data(self.mask_secrets(message))}", markup=False)
        self._called = "debug"

    def warning(self, message: str) -> None:
        self.console.print(f"::warning::{_escape_command_data(self.mask_secrets(message))}", markup=False)
        self._called = "warning"

    def error(self, message: str) -> None:
        self.console.print(f"::error::{_escape_command_data(self.mask_secrets(message))}", markup=False)
        self._called = "error"

    def set_failed(self, message: str) -> None:
        """Report an error and mark the run as failed without stopping it."""
        self.error(message)
        self.failed = True

    def exit(self, message: str) -> None:
        """Report a fatal error and stop the process with a non-zero status."""
        self.set_failed(message)
        sys.exit(1)

    # ------------------------------------------------------------------ #
    # Masking                                                              #
    # ------------------------------------------------------------------ #

    def register_secret(self, value: str | None) -> None:
        """Mask ``value`` wherever it appears, whatever precedes it."""
        if value and value not in self.matched:
            self.matched.append(value)

    def mask_secrets(self, message: str) -> str:
        """Replace the values of secret-looking keys with ***.

        For each filter term, any word containing the term followed by an
        optional separator (``:``, ``=``, ``>``) marks the rest of the line as
        secret. Values found this way are remembered for later messages.
        """
        filtered = str(message)
        for secret in self.secrets_filter:
            if not secret:
                continue
            term = re.escape(secret)
            if not re.search(term, filtered, re.IGNORECASE):
                continue
            pattern = re.compile(rf"\w*{term}\w*(?:[ \t]*[:=>]*[ \t]*)(.*)", re.IGNORECASE)
            for match in list(pattern.finditer(filtered)):
                value = match.group(1)
                if value and value != MASK:
                    if value not in self.matched:
                        self.matched.append(value)
                    filtered = filtered.replace(value, MASK)
        for value in self.matched:
            filtered = filtered.replace(value, MASK)
        return filtered
