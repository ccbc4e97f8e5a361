"""Interactive choice prompt for disambiguating chart matches."""

import sys

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings

QUIT_ALIASES = frozenset(("quit", "exit", "q", ""))


def is_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def create_key_bindings() -> KeyBindings:
    """Create custom key bindings for the prompt."""
    bindings = KeyBindings()

    @bindings.add("escape", "escape")
    def double_escape(event):
        """Clear the input buffer on double escape."""
        event.current_buffer.reset()

    return bindings


def parse_choice(text: str, count: int) -> int | None:
    """Turn the user's answer into a 1-based index, or None if it isn't one."""
    text = text.strip()
    if text.lower() in QUIT_ALIASES or not text.isdecimal():
        return None
    idx = int(text)
    return idx if 1 <= idx <= count else None


def prompt_single_choice(
    count: int, session: PromptSession | None = None
) -> int | None:
    """Ask for a number between 1 and count.

    Returns the chosen 1-based index, or None if the user cancelled with
    Enter, q, Ctrl+C or Ctrl+D.
    """
    session = session or PromptSession(key_bindings=create_key_bindings())
    while True:
        try:
            answer = session.prompt(f"Select [1-{count}] (Enter to cancel): ")
        except (EOFError, KeyboardInterrupt):
            return None
        if answer.strip().lower() in QUIT_ALIASES:
            return None
        choice = parse_choice(answer, count)
        if choice is not None:
            return choice
        click.echo(f"Please enter a number between 1 and {count}.")
