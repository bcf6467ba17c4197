"""Tests for pubrel.output.console."""

from __future__ import annotations

import logging

from pubrel.output.console import (
    MockConsole,
    RichConsole,
    Style,
    configure_logging,
)


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: failed", "warning: careful", "info: fyi"]
        assert console.has_error()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.print("uploading a.zip", Style.DIM)
        console.print("uploading b.zip", Style.DIM)
        assert len(console.find("a.zip")) == 1
        assert console.text == "uploading a.zip\nuploading b.zip"


def test_rich_console_does_not_interpret_markup(capsys) -> None:
    console = RichConsole()
    console.error("bad credentials [REDACTED]")
    console.print("[bold]literal[/bold]", Style.DIM)

    out = capsys.readouterr().out
    assert "[REDACTED]" in out
    assert "[bold]literal[/bold]" in out


def test_configure_logging_does_not_stack_handlers() -> None:
    configure_logging(verbose=True)
    configure_logging(verbose=False)

    logger = logging.getLogger("pubrel")
    tagged = [h for h in logger.handlers if getattr(h, "_pubrel_rich_handler", False)]
    assert len(tagged) == 1
    assert logger.level == logging.WARNING
