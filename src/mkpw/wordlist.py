# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Word lists: the alphabet from which passphrase words are drawn."""

from __future__ import annotations

import functools
import importlib.resources
import logging
import pathlib
import unicodedata
from typing import TYPE_CHECKING

from mkpw import _types

if TYPE_CHECKING:
    import os
    from collections.abc import Iterable, Iterator

    from mkpw import separators

__all__ = ('EmptyWordList', 'SeparatorWordConflict', 'WordList')

logger = logging.getLogger(__name__)

DEFAULT_WORD_LIST_RESOURCE = 'wordlist.txt'
"""The name of the embedded default word list, within this package."""


class EmptyWordList(_types.GenerationError, ValueError):  # noqa: N818
    """The word list has fewer than two distinct words.

    No passphrase with any entropy can be generated from such a list.

    """


class SeparatorWordConflict(_types.GenerationError, ValueError):  # noqa: N818
    """A word in the word list contains a separator character.

    Passphrases generated from such a word list and separator would
    not be unambiguously splittable into their words.  Choose
    a different separator or a different word list.

    """


class WordList:
    """An immutable, ordered list of distinct, lowercase words.

    Words are normalized upon construction: surrounding whitespace is
    stripped, the Unicode normalization form NFC is applied, and the
    word is lowercased.  Words that become duplicates after
    normalization are kept only once (in first-seen order), so that
    every word is equally likely to be drawn.

    Word lists are read-only after construction, and may be shared
    freely between threads and recipes.

    """

    __slots__ = ('_words',)

    def __init__(
        self,
        words: Iterable[str],
        /,
        *,
        separator: separators.SeparatorPolicy | None = None,
    ) -> None:
        """Initialize the word list.

        Args:
            words:
                The words.  Must be non-empty strings.
            separator:
                If given, ensure that no word conflicts with this
                separator policy.

        Raises:
            EmptyWordList:
                There are fewer than two distinct words.
            SeparatorWordConflict:
                A word conflicts with the given separator policy.
            TypeError:
                A word is not a string.
            ValueError:
                A word is empty.

        """
        normalized: list[str] = []
        seen: set[str] = set()
        duplicates = 0
        for word in words:
            if not isinstance(word, str):
                msg = f'not a string: {word!r}'
                raise TypeError(msg)
            word = unicodedata.normalize('NFC', word.strip()).lower()  # noqa: PLW2901
            if not word:
                msg = 'empty word in word list'
                raise ValueError(msg)
            if word in seen:
                duplicates += 1
                continue
            seen.add(word)
            normalized.append(word)
        if duplicates:
            logger.debug(
                'Dropped %d duplicate word(s) from word list', duplicates
            )
        if len(normalized) < 2:  # noqa: PLR2004
            msg = (
                f'word list needs at least two distinct words, '
                f'found {len(normalized)}'
            )
            raise EmptyWordList(msg)
        self._words: tuple[str, ...] = tuple(normalized)
        if separator is not None:
            self.check_separator(separator)

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        /,
        *,
        separator: separators.SeparatorPolicy | None = None,
    ) -> WordList:
        """Build a word list from lines of text.

        Blank lines, and lines starting with `#`, are ignored.

        Raises:
            EmptyWordList:
                There are fewer than two distinct words.
            SeparatorWordConflict:
                A word conflicts with the given separator policy.

        Examples:
            >>> wl = WordList.from_lines(['# fruit', 'Apple', '', 'banana'])
            >>> list(wl)
            ['apple', 'banana']

        """
        words = (
            line.strip()
            for line in lines
            if line.strip() and not line.lstrip().startswith('#')
        )
        return cls(words, separator=separator)

    @classmethod
    def from_file(
        cls,
        path: str | os.PathLike[str],
        /,
        *,
        separator: separators.SeparatorPolicy | None = None,
    ) -> WordList:
        """Load a word list from a UTF-8 text file, one word per line.

        See [`from_lines`][] for the file format.

        Raises:
            OSError:
                The file cannot be read.
            UnicodeError:
                The file is not valid UTF-8.
            EmptyWordList:
                There are fewer than two distinct words.
            SeparatorWordConflict:
                A word conflicts with the given separator policy.

        """
        with pathlib.Path(path).open(encoding='UTF-8') as fileobj:
            return cls.from_lines(fileobj, separator=separator)

    @classmethod
    def default(
        cls,
        *,
        separator: separators.SeparatorPolicy | None = None,
    ) -> WordList:
        """Return the embedded default word list.

        The list is loaded once per process, and shared afterwards.

        Raises:
            SeparatorWordConflict:
                A word conflicts with the given separator policy.

        """
        word_list = _default_word_list()
        if separator is not None:
            word_list.check_separator(separator)
        return word_list

    def check_separator(
        self,
        separator: separators.SeparatorPolicy,
        /,
    ) -> None:
        """Ensure that no word conflicts with the separator policy.

        Raises:
            SeparatorWordConflict:
                Some word conflicts with the separator policy.  The
                message names the first such word.

        """
        for word in self._words:
            if separator.conflicts_with(word):
                msg = (
                    f'word {word!r} conflicts with separator '
                    f'{separator.describe()}'
                )
                raise SeparatorWordConflict(msg)

    def size(self) -> int:
        """Return the number of words."""
        return len(self._words)

    def word_at(self, index: int, /) -> str:
        """Return the word at the given index.

        Raises:
            IndexError:
                `index` is outside the range 0, ..., `size() - 1`.
            TypeError:
                `index` is not an integer.

        """
        if not isinstance(index, int) or isinstance(index, bool):
            msg = f'not an integer: {index!r}'
            raise TypeError(msg)
        if index not in range(len(self._words)):
            msg = f'word index out of range: {index!r}'
            raise IndexError(msg)
        return self._words[index]

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, index: int, /) -> str:
        return self.word_at(index)

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __contains__(self, word: object, /) -> bool:
        return word in self._words

    def __eq__(self, other: object, /) -> bool:
        if not isinstance(other, WordList):
            return NotImplemented
        return self._words == other._words

    def __hash__(self) -> int:
        return hash(self._words)

    def __repr__(self) -> str:
        preview = ', '.join(repr(w) for w in self._words[:3])
        more = ', ...' if len(self._words) > 3 else ''  # noqa: PLR2004
        name = self.__class__.__name__
        return f'{name}([{preview}{more}], size={len(self)})'


@functools.lru_cache(maxsize=None)
def _default_word_list() -> WordList:
    resource = importlib.resources.files(__package__).joinpath(
        DEFAULT_WORD_LIST_RESOURCE
    )
    with resource.open('r', encoding='UTF-8') as fileobj:
        return WordList.from_lines(fileobj)
