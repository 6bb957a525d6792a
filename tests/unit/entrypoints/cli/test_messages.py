"""Unit tests for :mod:`isotest.entrypoints.cli.helpers.messages`."""

import io

import click
import pytest

from isotest.entrypoints.cli.helpers import messages


class FakeStream(io.StringIO):
    """A text stream with a controllable encoding that claims to be a TTY."""

    def __init__(self, encoding: str) -> None:
        super().__init__()
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        return self._encoding

    def isatty(self) -> bool:
        return True


@pytest.mark.parametrize(
    ("encoding", "expected"),
    [
        ("utf-8", ("⚠️", "✅", "❌")),
        ("ascii", ("[!]", "[OK]", "[X]")),
    ],
)
def test_glyphs_follow_stderr_encoding(
    monkeypatch: pytest.MonkeyPatch, encoding: str, expected: tuple[str, str, str]
) -> None:
    stream = FakeStream(encoding)
    monkeypatch.setattr(click, "get_text_stream", lambda name: stream)
    assert (
        messages.caution_glyph(),
        messages.success_glyph(),
        messages.error_glyph(),
    ) == expected


@pytest.mark.parametrize(
    ("emit", "text"),
    [(messages.warn, "careful"), (messages.success, "done"), (messages.error, "broken")],
)
def test_messages_go_to_stderr(capsys: pytest.CaptureFixture[str], emit, text: str) -> None:
    emit(text)
    captured = capsys.readouterr()
    assert text in captured.err
    assert captured.out == ""
