# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Passphrase recipes, and passphrase generation from recipes."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from mkpw import _types, randomness, separators
from mkpw.capitalization import CapitalizationPolicy, capitalize

if TYPE_CHECKING:
    from mkpw import wordlist

__all__ = ('InvalidRecipeSize', 'Recipe', 'generate')

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 5
"""The default number of words per passphrase."""


class InvalidRecipeSize(_types.GenerationError, ValueError):  # noqa: N818
    """The requested number of words is not positive."""


class Recipe:
    """A recipe for passphrases: words, word count, separator, case.

    A recipe fully describes the distribution from which passphrases
    are drawn, and thus also their entropy.  Recipes are immutable;
    every call to [`generate`][] is independent and uses fresh
    randomness, so a recipe may be reused, also concurrently.

    The passphrase is built as follows:

     1. Draw `size` words from the word list, uniformly and
        independently (words may repeat).
     2. Capitalize the words according to the capitalization policy.
     3. Join the words, asking the separator policy for each of the
        `size - 1` gaps.

    The entropy of the result is the sum of the entropies of all those
    random decisions: `size * log2(len(word_list))` bits for the words,
    plus the capitalization entropy, plus `size - 1` times the
    per-gap separator entropy.

    """

    __slots__ = ('_capitalization', '_separator', '_size', '_word_list')

    def __init__(
        self,
        word_list: wordlist.WordList,
        size: int = DEFAULT_SIZE,
        *,
        separator: separators.SeparatorPolicy | None = None,
        capitalization: CapitalizationPolicy = CapitalizationPolicy.ONE,
    ) -> None:
        """Initialize the recipe.

        Args:
            word_list:
                The words to draw from.
            size:
                The number of words per passphrase.  Must be positive.
            separator:
                The separator policy.  Defaults to a hyphen.
            capitalization:
                The capitalization policy.  Defaults to capitalizing
                one random word.

        Raises:
            InvalidRecipeSize:
                `size` is not positive.
            SeparatorWordConflict:
                Some word in the word list contains a separator
                character.
            TypeError:
                `size` is not an integer.

        """
        if separator is None:
            separator = separators.SEPARATOR_PRESETS['hyphen']
        self._check_size(size)
        word_list.check_separator(separator)
        self._word_list = word_list
        self._size = size
        self._separator = separator
        self._capitalization = capitalization
        if capitalization.is_random:
            uncased = sum(1 for w in word_list if capitalize(w) == w)
            if uncased:
                logger.warning(
                    '%d word(s) in the word list are unaffected by '
                    'capitalization; the reported entropy overstates '
                    'the number of distinct passphrases',
                    uncased,
                )

    @staticmethod
    def _check_size(size: int, /) -> None:
        if not isinstance(size, int) or isinstance(size, bool):
            msg = f'not an integer: {size!r}'
            raise TypeError(msg)
        if size < 1:
            msg = f'invalid recipe size: {size!r} (must be at least 1)'
            raise InvalidRecipeSize(msg)

    @property
    def word_list(self) -> wordlist.WordList:
        """The word list to draw from."""
        return self._word_list

    @property
    def size(self) -> int:
        """The number of words per passphrase."""
        return self._size

    @property
    def separator(self) -> separators.SeparatorPolicy:
        """The separator policy."""
        return self._separator

    @property
    def capitalization(self) -> CapitalizationPolicy:
        """The capitalization policy."""
        return self._capitalization

    def _entropy_contributions(self) -> list[float]:
        return [
            *([math.log2(self._word_list.size())] * self._size),
            self._capitalization.entropy(self._size),
            *([self._separator.entropy] * (self._size - 1)),
        ]

    @property
    def entropy(self) -> float:
        """The entropy of passphrases generated from this recipe, in bits.

        This is computed without drawing any randomness, and always
        equals the entropy reported by [`generate`][].

        """
        return math.fsum(self._entropy_contributions())

    def generate(
        self,
        *,
        source: randomness.RandomSource | None = None,
    ) -> _types.Password:
        """Generate a passphrase.

        Args:
            source:
                The random source to draw from.  Defaults to the
                process-wide secure random source.

        Returns:
            The passphrase, and its entropy in bits.

        Raises:
            InvalidRecipeSize:
                The recipe size is not positive.  No randomness is
                consumed in this case.
            RandomSourceUnavailable:
                The random source failed.  No partial result is
                returned, and the draw is not retried.

        """
        self._check_size(self._size)
        if source is None:
            source = randomness.default_source()
        word_count = self._word_list.size()
        word_entropy = math.log2(word_count)
        contributions: list[float] = []
        words: list[str] = []
        for _ in range(self._size):
            index = source.uniform_int(word_count)
            words.append(self._word_list.word_at(index))
            contributions.append(word_entropy)
        cased, cap_entropy = self._capitalization.apply(words, source)
        contributions.append(cap_entropy)
        pieces = [cased[0]]
        for word in cased[1:]:
            text, sep_entropy = self._separator.next(source)
            pieces.extend((text, word))
            contributions.append(sep_entropy)
        entropy = math.fsum(contributions)
        logger.debug(
            'Generated a %d-word passphrase (%.3f bits of entropy)',
            self._size,
            entropy,
        )
        return _types.Password(''.join(pieces), entropy)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}({self._word_list!r}, {self._size!r}, '
            f'separator={self._separator!r}, '
            f'capitalization={self._capitalization!r})'
        )


def generate(
    recipe: Recipe,
    /,
    *,
    source: randomness.RandomSource | None = None,
) -> _types.Password:
    """Generate a passphrase from `recipe`.

    See [`Recipe.generate`][] for details.

    Examples:
        >>> from mkpw import wordlist
        >>> from mkpw.capitalization import CapitalizationPolicy
        >>> wl = wordlist.WordList(['apple', 'banana', 'cherry', 'date'])
        >>> recipe = Recipe(
        ...     wl,
        ...     3,
        ...     separator=separators.SeparatorPolicy.fixed('-'),
        ...     capitalization=CapitalizationPolicy.NONE,
        ... )
        >>> password = generate(recipe)
        >>> password.entropy
        6.0
        >>> all(word in wl for word in password.value.split('-'))
        True

    """
    return recipe.generate(source=source)
