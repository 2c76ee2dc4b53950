# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Types used by mkpw."""

from __future__ import annotations

import enum
import json
from typing import TYPE_CHECKING

from typing_extensions import (
    NamedTuple,
    NotRequired,
    TypedDict,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from typing_extensions import Any, TypeIs

__all__ = (
    'GenerationError',
    'Password',
    'SeparatorKind',
    'UserConfig',
    'is_user_config',
)


class GenerationError(Exception):
    """Base class of all errors raised by the passphrase generator.

    Every condition signalled through a subclass of this error is
    either a configuration defect (word list, separator, recipe size)
    or a failure of the secure random source.  None of them are
    retried or silently recovered from; they are always propagated to
    the immediate caller.

    """


class Password(NamedTuple):
    """A generated passphrase, together with its recipe entropy.

    Attributes:
        value:
            The passphrase: the (capitalized) words, joined by the
            separators.
        entropy:
            The information content of all random decisions made while
            generating `value`, in bits.  This is a property of the
            recipe (of the distribution), not of the particular
            outcome.

    """

    value: str
    """"""
    entropy: float
    """"""

    def __str__(self) -> str:
        return self.value


class SeparatorKind(str, enum.Enum):
    """The closed set of separator strategies.

    Attributes:
        FIXED:
            The same, fixed string between every pair of words.
        DIGIT:
            A single decimal digit, drawn uniformly per gap.
        NONE:
            No separator at all.

    """

    FIXED = 'fixed'
    """"""
    DIGIT = 'digit'
    """"""
    NONE = 'none'
    """"""


class UserConfigDefaults(TypedDict, total=False):
    r"""Configuration for mkpw: default settings.

    Attributes:
        size:
            The number of words per passphrase.  Must be positive.
        separator:
            The name of the separator preset, e.g. `hyphen` or `digit`.
        capitalize:
            The name of the capitalization scheme, e.g. `one`.
        wordlist:
            The path to a custom word list file.
        entropy:
            If true, also display the recipe entropy.

    """

    size: NotRequired[int]
    """"""
    separator: NotRequired[str]
    """"""
    capitalize: NotRequired[str]
    """"""
    wordlist: NotRequired[str]
    """"""
    entropy: NotRequired[bool]
    """"""


class UserConfig(TypedDict, total=False):
    r"""User configuration for mkpw.  For typing purposes.

    Usually stored as TOML.

    Attributes:
        defaults:
            Default settings, overridable on the command-line.

    """

    defaults: NotRequired[UserConfigDefaults]
    """"""


def json_path(path: Sequence[str | int], /) -> str:
    r"""Transform a series of keys and indices into a JSONPath selector.

    The resulting JSONPath selector conforms to RFC 9535, is always
    rooted at the JSON root node (i.e., starts with `$`), and only
    contains name and index selectors (in shorthand dot notation, where
    possible).

    Args:
        path:
            A sequence of object keys or array indices to navigate to
            the desired value, starting from the root node.

    Returns:
        A valid JSONPath selector (a string) identifying the desired
        value.

    Examples:
        >>> json_path(['defaults', 'size'])
        '$.defaults.size'
        >>> json_path(['defaults', 'key with spaces'])
        '$.defaults["key with spaces"]'
        >>> json_path(['custom_array', 2, 0])
        '$.custom_array[2][0]'

    """

    def needs_longhand(x: str | int) -> bool:
        initial = (
            frozenset('abcdefghijklmnopqrstuvwxyz')
            | frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZ')
            | frozenset('_')
        )
        chars = initial | frozenset('0123456789')
        return not (
            isinstance(x, str)
            and x
            and set(x).issubset(chars)
            and x[:1] in initial
        )

    chunks = ['$']
    chunks.extend(
        f'[{json.dumps(x)}]' if needs_longhand(x) else f'.{x}' for x in path
    )
    return ''.join(chunks)


def validate_user_config(  # noqa: C901
    obj: Any,  # noqa: ANN401
    /,
    *,
    allow_unknown_settings: bool = False,
) -> None:
    """Check that `obj` is a valid mkpw user configuration.

    Only the shape and the types are checked here.  Whether the
    separator and capitalization names are known is decided by
    [`mkpw.separators`][] and [`mkpw.capitalization`][] when the
    settings are resolved.

    Args:
        obj:
            The object to test.
        allow_unknown_settings:
            If false, abort on unknown settings.

    Raises:
        TypeError:
            An entry in the user config, or the user config itself,
            has the wrong type.
        ValueError:
            An entry in the user config is not allowed, or has a
            disallowed value.

    """
    err_obj_not_a_dict = 'user config is not a dict'

    def err_not_a_dict(path: Sequence[str], /) -> str:
        json_path_str = json_path(path)
        return f'user config entry {json_path_str} is not a dict'

    def err_not_a_string(path: Sequence[str], /) -> str:
        json_path_str = json_path(path)
        return f'user config entry {json_path_str} is not a string'

    def err_not_an_int(path: Sequence[str], /) -> str:
        json_path_str = json_path(path)
        return f'user config entry {json_path_str} is not an integer'

    def err_not_a_bool(path: Sequence[str], /) -> str:
        json_path_str = json_path(path)
        return f'user config entry {json_path_str} is not a boolean'

    def err_unknown_setting(key: str, path: Sequence[str], /) -> str:
        json_path_str = json_path(path)
        return (
            f'user config entry {json_path_str} uses '
            f'unknown setting {key!r}'
        )

    if not isinstance(obj, dict):
        raise TypeError(err_obj_not_a_dict)
    for key in obj:
        if key != 'defaults' and not allow_unknown_settings:
            raise ValueError(err_unknown_setting(key, ()))
    if 'defaults' not in obj:
        return
    defaults = obj['defaults']
    path = ('defaults',)
    if not isinstance(defaults, dict):
        raise TypeError(err_not_a_dict(path))
    for key, value in defaults.items():
        # Use match/case here once Python 3.9 becomes unsupported.
        if key in {'separator', 'capitalize', 'wordlist'}:
            if not isinstance(value, str):
                raise TypeError(err_not_a_string((*path, key)))
        elif key == 'size':
            # bool is a subclass of int; a boolean size is a typo.
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(err_not_an_int((*path, key)))
            if value < 1:
                json_path_str = json_path((*path, key))
                msg = f'user config entry {json_path_str} is not positive'
                raise ValueError(msg)
        elif key == 'entropy':
            if not isinstance(value, bool):
                raise TypeError(err_not_a_bool((*path, key)))
        elif not allow_unknown_settings:
            raise ValueError(err_unknown_setting(key, path))


def is_user_config(obj: Any) -> TypeIs[UserConfig]:  # noqa: ANN401
    """Check if `obj` is a valid user config, according to typing.

    Args:
        obj: The object to test.

    Returns:
        True if this is a user config, false otherwise.

    """
    try:
        validate_user_config(obj, allow_unknown_settings=True)
    except (TypeError, ValueError) as exc:
        if 'user config' not in str(exc):  # pragma: no cover
            raise  # noqa: DOC501
        return False
    return True
