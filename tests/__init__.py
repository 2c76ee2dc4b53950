# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import contextlib
import inspect
import os
import threading
from typing import TYPE_CHECKING

import click.testing
from hypothesis import strategies
from typing_extensions import NamedTuple, Self

from mkpw import randomness
from mkpw._internals import cli_helpers, cli_machinery

__all__ = ()

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

    import pathlib

    import pytest
    from typing_extensions import Any


# Random sources
# ==============


class ScriptedRandomSource:
    """A random source replaying a fixed script of draws.

    Each call to `uniform_int(n)` returns the next scripted value, and
    records `n`.  Scripted values must lie in the requested range.  Once
    the script is used up, the source reports exhaustion.

    If `cycle` is true, the script is repeated indefinitely instead.  If
    `modular` is true, scripted values are reduced modulo the requested
    range instead of being checked against it.

    """

    def __init__(
        self,
        values: Iterable[int] = (),
        /,
        *,
        cycle: bool = False,
        modular: bool = False,
    ) -> None:
        self.values = list(values)
        self.cycle = cycle
        self.modular = modular
        self.requests: list[int] = []
        self._lock = threading.Lock()

    @property
    def draws(self) -> int:
        return len(self.requests)

    def uniform_int(self, n: int, /) -> int:
        with self._lock:
            index = len(self.requests)
            if self.cycle and self.values:
                index %= len(self.values)
            if index >= len(self.values):
                raise randomness.RandomSourceExhaustedError
            value = self.values[index]
            if self.modular:
                value %= n
            if value not in range(n):
                msg = f'scripted value {value!r} out of range for n={n!r}'
                raise AssertionError(msg)
            self.requests.append(n)
            return value


class CountingRandomSource:
    """A random source delegating to another source, counting the draws."""

    def __init__(
        self,
        inner: randomness.RandomSource | None = None,
        /,
    ) -> None:
        if inner is None:
            inner = randomness.SecureRandomSource()
        self.inner = inner
        self.requests: list[int] = []
        self._lock = threading.Lock()

    @property
    def draws(self) -> int:
        return len(self.requests)

    def uniform_int(self, n: int, /) -> int:
        with self._lock:
            self.requests.append(n)
        return self.inner.uniform_int(n)


class FailingRandomSource:
    """A random source that always fails."""

    def __init__(self) -> None:
        self.draws = 0

    def uniform_int(self, n: int, /) -> int:
        del n
        self.draws += 1
        msg = 'simulated random source failure'
        raise randomness.RandomSourceUnavailable(msg)


# Hypothesis strategies
# =====================

plain_words = strategies.text(
    alphabet=strategies.sampled_from('abcdefghijklmnopqrstuvwxyz'),
    min_size=1,
    max_size=12,
)
"""Lowercase ASCII words, as found in typical word lists."""

plain_word_lists = strategies.lists(
    plain_words, min_size=2, max_size=64, unique=True
)
"""Lists of distinct lowercase ASCII words, usable as word lists."""


# CLI testing
# ===========


class CliRunner(click.testing.CliRunner):
    """A [`click.testing.CliRunner`][] with the standard CLI logging set up.

    [`click.testing.CliRunner.invoke`][] calls the `.main` method of the
    command, and thus bypasses the logging setup of the top-level
    command.  We redo that setup here.

    Standard output and standard error are always captured separately.

    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:  # noqa: ANN401
        # click 8.2 removed the option; its stdout is never mixed.
        if 'mix_stderr' in inspect.signature(super().__init__).parameters:
            kwargs.setdefault('mix_stderr', False)
        super().__init__(*args, **kwargs)

    def invoke(  # noqa: D102
        self,
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> click.testing.Result:
        logging_setup = cli_machinery.StandardCLILogging
        with (
            logging_setup.ensure_standard_logging(),
            logging_setup.ensure_standard_warnings_logging(),
        ):
            return super().invoke(*args, **kwargs)


@contextlib.contextmanager
def isolated_config(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: pathlib.Path,
) -> Iterator[None]:
    """Run in a fresh working directory, with an empty config directory.

    The home directory is set to the temporary directory `tmp_path`,
    which also becomes the working directory.

    """
    prog_name = cli_helpers.PROG_NAME
    env_name = prog_name.replace(' ', '_').upper() + '_PATH'
    with monkeypatch.context() as m:
        m.chdir(tmp_path)
        m.setenv('HOME', str(tmp_path))
        m.setenv('USERPROFILE', str(tmp_path))
        m.delenv(env_name, raising=False)
        config_dir = cli_helpers.config_filename(subsystem=None)
        os.makedirs(config_dir, exist_ok=True)
        yield


@contextlib.contextmanager
def isolated_user_config(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: pathlib.Path,
    config: str,
) -> Iterator[None]:
    """Like [`isolated_config`][], but with a `config.toml` file.

    Args:
        config:
            The TOML text of the user configuration.

    """
    with isolated_config(monkeypatch=monkeypatch, tmp_path=tmp_path):
        config_filename = cli_helpers.config_filename(
            subsystem='user configuration'
        )
        with open(config_filename, 'w', encoding='UTF-8') as outfile:
            outfile.write(config)
        yield


def write_word_list(filename: str, words: Sequence[str], /) -> None:
    with open(filename, 'w', encoding='UTF-8') as outfile:
        for word in words:
            print(word, file=outfile)


class ReadableResult(NamedTuple):
    """Helper class for formatting and testing click.testing.Result objects."""

    exception: BaseException | None
    exit_code: int
    output: str
    stderr: str

    @classmethod
    def parse(cls, r: click.testing.Result, /) -> Self:
        try:
            stderr = r.stderr
        except ValueError:
            stderr = r.output
        return cls(r.exception, r.exit_code, r.stdout or '', stderr or '')

    def clean_exit(
        self, *, output: str = '', empty_stderr: bool = False
    ) -> bool:
        """Return whether the invocation exited cleanly.

        Args:
            output:
                An expected output string.

        """
        return (
            (
                not self.exception
                or (
                    isinstance(self.exception, SystemExit)
                    and self.exit_code == 0
                )
            )
            and (not output or output in self.output)
            and (not empty_stderr or not self.stderr)
        )

    def error_exit(
        self,
        *,
        error: str | type[BaseException] = BaseException,
        exit_code: int = 1,
    ) -> bool:
        """Return whether the invocation exited uncleanly.

        Args:
            error:
                An expected error message, or an expected exception
                type.
            exit_code:
                The expected exit status, for error messages.

        """
        # Use match/case here once Python 3.9 becomes unsupported.
        if isinstance(error, str):
            return (
                isinstance(self.exception, SystemExit)
                and self.exit_code == exit_code
                and (not error or error in self.stderr)
            )
        else:  # noqa: RET505
            return isinstance(self.exception, error)


def chi_square(counts: Mapping[Any, int], /, *, expected: float) -> float:
    """Return Pearson's chi-square statistic for uniform counts."""
    return sum((c - expected) ** 2 / expected for c in counts.values())
