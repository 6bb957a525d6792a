"""Terminal message helpers for the isotest CLI.

One-line status messages with an emoji glyph, or an ASCII fallback when
stderr cannot encode it. Messages go to stderr; stdout carries the report.
"""

import click

# (emoji, ASCII fallback)
CAUTION = ("⚠️", "[!]")  # pragma: no mutate
SUCCESS = ("✅", "[OK]")  # pragma: no mutate
ERROR = ("❌", "[X]")  # pragma: no mutate


def _supports_character(character: str) -> bool:
    """Return True if ``character`` can be encoded on the current stderr stream."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    try:
        character.encode(getattr(stream, "encoding"))
    except UnicodeEncodeError:
        return False
    return True


def _glyph(choice: tuple[str, str]) -> str:
    emoji, fallback = choice
    return emoji if _supports_character(emoji) else fallback


def caution_glyph() -> str:
    """Return "⚠️" or "[!]"."""
    return _glyph(CAUTION)


def success_glyph() -> str:
    """Return "✅" or "[OK]"."""
    return _glyph(SUCCESS)


def error_glyph() -> str:
    """Return "❌" or "[X]"."""
    return _glyph(ERROR)


def warn(msg: str) -> None:
    """Print a bold yellow warning line on stderr, e.g. ``⚠️  No test files found``."""
    click.secho(f"{caution_glyph()}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Print a bold green success line on stderr, e.g. ``✅  All 3 file(s) passed``."""
    click.secho(f"{success_glyph()}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Print a bold red error line on stderr, e.g. ``❌  1 of 3 file(s) failed``."""
    click.secho(f"{error_glyph()}  {msg}", fg="red", bold=True, err=True)
