# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

import hypothesis
import pytest

from mkpw._internals import cli_machinery

if TYPE_CHECKING:
    from collections.abc import Iterator

# https://hypothesis.readthedocs.io/en/latest/settings.html#settings-profiles
hypothesis.settings.register_profile('ci', max_examples=1000)
hypothesis.settings.register_profile('dev', max_examples=10)
hypothesis.settings.register_profile(
    'debug', max_examples=10, verbosity=hypothesis.Verbosity.verbose
)
hypothesis.settings.register_profile(
    'flaky', deadline=datetime.timedelta(milliseconds=150)
)


# https://docs.pytest.org/en/stable/explanation/fixtures.html#a-note-about-fixture-cleanup
# https://github.com/pytest-dev/pytest/issues/5243#issuecomment-491522595
@pytest.fixture(scope='session', autouse=True)
def term_handler() -> Iterator[None]:  # pragma: no cover
    try:
        import signal  # noqa: PLC0415

        sigint_handler = signal.getsignal(signal.SIGINT)
    except (ImportError, OSError):
        return
    else:
        orig_term = signal.signal(signal.SIGTERM, sigint_handler)
        yield
        signal.signal(signal.SIGTERM, orig_term)


@pytest.fixture(autouse=True)
def reset_cli_logging_levels() -> Iterator[None]:
    """Undo the logging level changes of `-v`, `-q` and `--debug`.

    These options adjust global logger and handler state, which would
    otherwise leak into subsequent tests.

    """
    handler = cli_machinery.StandardCLILogging.cli_handler
    logger = logging.getLogger(cli_machinery.StandardCLILogging.package_name)
    handler_level = handler.level
    logger_level = logger.level
    try:
        yield
    finally:
        handler.setLevel(handler_level)
        logger.setLevel(logger_level)
