# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Capitalization policies for passphrase words."""

from __future__ import annotations

import enum
import math
from typing import TYPE_CHECKING

from typing_extensions import assert_never

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mkpw import randomness

__all__ = ('CapitalizationPolicy', 'capitalize')


def capitalize(word: str, /) -> str:
    """Upper-case the first character of `word`, keep the rest as is.

    Unlike [`str.capitalize`][], the remaining characters are not
    lowercased.

    Examples:
        >>> capitalize('apple')
        'Apple'
        >>> capitalize('iPhone')
        'IPhone'
        >>> capitalize('')
        ''

    """
    return word[:1].upper() + word[1:]


class CapitalizationPolicy(str, enum.Enum):
    """How the words of a passphrase are capitalized.

    The policy is applied once per generated passphrase, to all words
    at once, because the randomized schemes make a single decision
    over the whole word sequence.  The reported entropy is the exact
    information content of the random draws made, as a function of the
    number of words `N` only.

    Attributes:
        NONE:
            No word is capitalized.  Entropy 0.
        FIRST:
            Only the first word is capitalized.  Entropy 0.
        ALL:
            Every word is capitalized.  Entropy 0.
        ONE:
            Exactly one word, chosen uniformly at random, is
            capitalized.  Entropy `log2(N)`.
        RANDOM:
            Each word is capitalized with probability 1/2,
            independently.  Entropy `N`.

    """

    NONE = 'none'
    """"""
    FIRST = 'first'
    """"""
    ALL = 'all'
    """"""
    ONE = 'one'
    """"""
    RANDOM = 'random'
    """"""

    @classmethod
    def from_name(cls, name: str, /) -> CapitalizationPolicy:
        """Resolve a user-facing capitalization scheme name.

        Raises:
            ValueError:
                The name is unknown.

        Examples:
            >>> CapitalizationPolicy.from_name('one')
            <CapitalizationPolicy.ONE: 'one'>

        """
        try:
            return cls(name)
        except ValueError:
            msg = f'invalid capitalization scheme: {name!r}'
            raise ValueError(msg) from None

    @property
    def is_random(self) -> bool:
        """True if this scheme draws randomness."""
        return self in {CapitalizationPolicy.ONE, CapitalizationPolicy.RANDOM}

    def entropy(self, size: int, /) -> float:
        """Return the entropy of capitalizing `size` words, in bits.

        Raises:
            ValueError:
                `size` is not positive.

        Examples:
            >>> CapitalizationPolicy.ONE.entropy(4)
            2.0
            >>> CapitalizationPolicy.RANDOM.entropy(5)
            5.0
            >>> CapitalizationPolicy.ALL.entropy(5)
            0.0

        """
        if size < 1:
            msg = f'invalid word count: {size!r}'
            raise ValueError(msg)
        if self == CapitalizationPolicy.ONE:
            return math.log2(size)
        if self == CapitalizationPolicy.RANDOM:
            return float(size)
        return 0.0

    def apply(
        self,
        words: Sequence[str],
        source: randomness.RandomSource,
        /,
    ) -> tuple[tuple[str, ...], float]:
        """Capitalize the words of one passphrase.

        The [`ONE`][] scheme draws exactly once from `source` (a base
        `N` integer), the [`RANDOM`][] scheme draws exactly `N` times
        (one base 2 integer per word), and all other schemes never
        draw.

        Args:
            words:
                The `N` words of the passphrase, in order.
            source:
                The random source for the randomized schemes.

        Returns:
            A 2-tuple of the transformed words and the entropy (in
            bits) contributed by the capitalization decisions.

        Raises:
            RandomSourceUnavailable:
                The random source failed.
            ValueError:
                `words` is empty.

        """
        words = tuple(words)
        n = len(words)
        if not n:
            msg = 'no words to capitalize'
            raise ValueError(msg)
        result: tuple[str, ...]
        # Use match/case here once Python 3.9 becomes unsupported.
        if self == CapitalizationPolicy.NONE:
            result = words
        elif self == CapitalizationPolicy.FIRST:
            result = (capitalize(words[0]), *words[1:])
        elif self == CapitalizationPolicy.ALL:
            result = tuple(capitalize(w) for w in words)
        elif self == CapitalizationPolicy.ONE:
            pos = source.uniform_int(n)
            result = tuple(
                capitalize(w) if i == pos else w for i, w in enumerate(words)
            )
        elif self == CapitalizationPolicy.RANDOM:
            result = tuple(
                capitalize(w) if source.uniform_int(2) else w for w in words
            )
        else:  # pragma: no cover
            assert_never(self)
        return result, self.entropy(n)
