# /*
# Copyright 2026 The ARK Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Interactive prompts with a non-interactive defaults mode.

All prompts read from the controlling terminal rather than stdin, so the
quickstart keeps working when it is piped into a shell. In defaults mode no
input is read at all and every prompt resolves to its default.
"""

from __future__ import annotations

from typing import TextIO

from rich.console import Console
from rich.markup import escape

from quickstart_manager import logger
from quickstart_manager.errors import QuickstartError
from quickstart_manager.utils import print_error

TTY_PATH = "/dev/tty"
YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")
CHOICE_POLICIES = ("reprompt", "default")


class Prompter:
    """Renders free-form, yes/no, choice, and secret prompts.

    Args:
        console: Console used to render prompt text.
        use_defaults: Resolve every prompt to its default without reading input.
        stream: Input stream to read answers from, or None to open the terminal.
    """

    def __init__(self, console: Console, use_defaults: bool = False, stream: TextIO | None = None) -> None:
        self.console = console
        self.use_defaults = use_defaults
        self._stream = stream

    def _terminal(self) -> TextIO:
        if self._stream is None:
            try:
                self._stream = open(TTY_PATH)
            except OSError as err:
                raise QuickstartError(
                    "No terminal available for interactive prompts",
                    "Set ARK_QUICKSTART_USE_DEFAULTS=1 in .ark.env to run unattended",
                ) from err
        return self._stream

    def _read(self, prompt: str) -> str:
        stream = self._terminal()
        line = self.console.input(prompt, stream=stream)
        # readline() returns "" only at end of input; an empty answer is "\n".
        if line == "":
            raise QuickstartError(
                "Reached end of input while waiting for an answer",
                "Set ARK_QUICKSTART_USE_DEFAULTS=1 in .ark.env to run unattended",
            )
        return line.rstrip("\r\n").strip()

    def freeform(self, message: str, default: str = "") -> str:
        """Ask for a line of text, falling back to *default* on empty input."""
        if self.use_defaults:
            return default
        reply = self._read(f"    [bold]\\[?][/bold] {message} (default: {default}): ")
        return reply or default

    def yes_no(self, message: str, default: str = "y") -> bool:
        """Ask a yes/no question.

        Unrecognized answers count as "no", so a typo never triggers an install.

        Args:
            message: Question text.
            default: ``"y"`` or ``"n"``, used on empty input and in defaults mode.

        Returns:
            True if the user accepted.

        Raises:
            ValueError: If *default* is not ``"y"`` or ``"n"``.
        """
        if default not in ("y", "n"):
            raise ValueError(f"default must be 'y' or 'n', got {default!r}")
        if self.use_defaults:
            return default == "y"

        help_text = "Y/n" if default == "y" else "y/N"
        reply = self._read(f"    [bold]\\[?][/bold] {message} ({help_text}): ").lower()
        if reply in YES_ANSWERS:
            return True
        if reply in NO_ANSWERS:
            return False
        if not reply:
            return default == "y"
        logger.debug("Treating unrecognized answer %r as no", reply)
        return False

    def choice(self, message: str, options: list[str], default_policy: str = "default") -> str:
        """Ask the user to pick one of *options* by index or by name.

        Args:
            message: Question text.
            options: Ordered, non-empty option list; the first one is the default.
            default_policy: ``"default"`` returns the first option on empty input,
                ``"reprompt"`` asks again.

        Returns:
            The selected option, spelled as in *options*.

        Raises:
            ValueError: If *options* is empty or *default_policy* is unknown.
        """
        if default_policy not in CHOICE_POLICIES:
            raise ValueError(f"default_policy must be one of {CHOICE_POLICIES}, got {default_policy!r}")
        if not options:
            raise ValueError("choice() requires at least one option")
        if self.use_defaults:
            return options[0]

        last = len(options) - 1
        suffix = " (default: 0)" if default_policy == "default" else ""
        while True:
            self.console.print(f"    [bold]\\[?][/bold] {message}:")
            for idx, option in enumerate(options):
                self.console.print(f"        {idx}) {option}", markup=False)
            reply = self._read(f"        Enter choice [0-{last} or option name]{suffix}: ")

            if not reply:
                if default_policy == "default":
                    return options[0]
                print_error("Invalid input - No choice provided")
                continue

            if reply.isdecimal():
                idx = int(reply)
                if idx <= last:
                    return options[idx]
                print_error(f"Invalid input - The number {idx} is out of the range (0-{last})")
                continue

            for option in options:
                if reply.lower() == option.lower():
                    return option
            print_error(f"Invalid input: '{escape(reply)}' is not a valid option")

    def secret(self, message: str) -> str:
        """Read a value without echoing it; empty in defaults mode."""
        if self.use_defaults:
            return ""
        prompt = f"    [bold]\\[?][/bold] {message}: "
        if not self._terminal().isatty():
            return self._read(prompt)
        return self.console.input(prompt, password=True).strip()
