from __future__ import annotations

import logging

from report_cli.shared.logging import ConsoleLogHandler, configure_library_logging, get_logger


def test_logger_info_routes_to_stderr(capfd) -> None:
    logger = get_logger()

    logger.info("structured log to stderr")

    captured = capfd.readouterr()
    assert "structured log to stderr" in captured.err
    assert "structured log to stderr" not in captured.out


def test_debug_requires_verbose(capfd) -> None:
    get_logger(verbose=False).debug("hidden detail")
    get_logger(verbose=True).debug("shown detail")

    captured = capfd.readouterr()
    assert "hidden detail" not in captured.err
    assert "shown detail" in captured.err


def test_markup_is_printed_literally(capfd) -> None:
    get_logger().warning("[dry-run] nothing written")

    captured = capfd.readouterr()
    assert "[dry-run] nothing written" in captured.err


def test_library_records_follow_verbosity(capfd) -> None:
    library = logging.getLogger("report_cli.report_parse.pipeline")

    get_logger(verbose=False)
    library.debug("quiet skip")
    library.warning("loud warning")
    get_logger(verbose=True)
    library.debug("verbose skip")
    get_logger(verbose=False)

    captured = capfd.readouterr()
    assert "quiet skip" not in captured.err
    assert "report_cli.report_parse.pipeline: loud warning" in captured.err
    assert "verbose skip" in captured.err
    assert captured.out == ""


def test_console_handler_is_installed_once() -> None:
    get_logger()
    library_logger = configure_library_logging(verbose=False)

    handlers = [h for h in library_logger.handlers if isinstance(h, ConsoleLogHandler)]
    assert len(handlers) == 1
