# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Helper functions for the mkpw command-line.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import os
import pathlib
import sys

import click

import mkpw
from mkpw import _internals, _types, separators, wordlist

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__author__ = mkpw.__author__
__version__ = mkpw.__version__

PROG_NAME = _internals.PROG_NAME

# Error messages
INVALID_USER_CONFIG = 'Invalid user config'


# Configuration management
# ========================

config_filename_table = {
    None: '.',
    'user configuration': 'config.toml',
}


def config_filename(
    subsystem: str | None = 'user configuration',
) -> pathlib.Path:
    """Return the filename of the configuration file for the subsystem.

    The configuration directory is determined by the `MKPW_PATH`
    environment variable, or by [`click.get_app_dir`][] in POSIX mode.

    Args:
        subsystem:
            Name of the configuration subsystem whose configuration
            filename to return.  If `None`, return the configuration
            directory instead.

    Raises:
        AssertionError:
            An unknown subsystem was passed.

    """
    path = pathlib.Path(
        os.getenv(PROG_NAME.upper() + '_PATH')
        or click.get_app_dir(PROG_NAME, force_posix=True)
    )
    try:
        filename = config_filename_table[subsystem]
    except (KeyError, TypeError):  # pragma: no cover
        msg = f'Unknown configuration subsystem: {subsystem!r}'
        raise AssertionError(msg) from None
    return path / filename


def load_user_config() -> _types.UserConfig:
    """Load the user config from the application directory.

    The filename is obtained via [`config_filename`][].

    Returns:
        The user configuration, as a nested `dict`.

    Raises:
        OSError:
            There was an OS error accessing the file.
        ValueError:
            The data loaded from the file is not a valid configuration
            file.
        TypeError:
            The data loaded from the file has the wrong shape.

    """
    filename = config_filename(subsystem='user configuration')
    with filename.open('rb') as fileobj:
        data = tomllib.load(fileobj)
    _types.validate_user_config(data)
    assert _types.is_user_config(data), (
        f'{INVALID_USER_CONFIG}: validated config is not a user config'
    )
    return data


def load_word_list(
    path: str | os.PathLike[str] | None,
    /,
    *,
    separator: separators.SeparatorPolicy,
) -> wordlist.WordList:
    """Load the requested word list.

    Args:
        path:
            The path to a word list file, or `None` for the embedded
            default word list.
        separator:
            The separator policy the word list must be compatible with.

    Raises:
        OSError:
            The word list file cannot be read.
        UnicodeError:
            The word list file is not valid UTF-8.
        EmptyWordList:
            The word list has fewer than two distinct words.
        SeparatorWordConflict:
            A word conflicts with the separator policy.

    """
    if path is None:
        return wordlist.WordList.default(separator=separator)
    return wordlist.WordList.from_file(path, separator=separator)
