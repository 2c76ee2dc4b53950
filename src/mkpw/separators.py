# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Separator policies: the text inserted between passphrase words."""

from __future__ import annotations

import math
import types
from typing import TYPE_CHECKING

from typing_extensions import NamedTuple, assert_never

from mkpw import _types
from mkpw.capitalization import capitalize

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mkpw import randomness

__all__ = ('SEPARATOR_PRESETS', 'SeparatorPolicy')

DIGITS = '0123456789'


class SeparatorPolicy(NamedTuple):
    """A strategy for the text between two consecutive words.

    This is a tagged variant: the `kind` selects the strategy, and
    `text` is only meaningful for [fixed][_types.SeparatorKind.FIXED]
    separators.  Construct instances via [`fixed`][], [`digit`][],
    [`none`][] or [`from_name`][].  Policies are immutable and
    stateless; all randomness comes from the source passed to
    [`next`][].

    Attributes:
        kind:
            The separator strategy.
        text:
            The separator string, for fixed separators.

    """

    kind: _types.SeparatorKind
    """"""
    text: str = ''
    """"""

    @classmethod
    def fixed(cls, text: str, /) -> SeparatorPolicy:
        """Return a policy inserting `text` between every pair of words.

        Raises:
            TypeError:
                `text` is not a string.
            ValueError:
                `text` is empty.  Use [`none`][] instead.

        """
        if not isinstance(text, str):
            msg = f'not a string: {text!r}'
            raise TypeError(msg)
        if not text:
            msg = 'empty fixed separator'
            raise ValueError(msg)
        return cls(_types.SeparatorKind.FIXED, text)

    @classmethod
    def digit(cls) -> SeparatorPolicy:
        """Return a policy inserting one uniformly random decimal digit."""
        return cls(_types.SeparatorKind.DIGIT)

    @classmethod
    def none(cls) -> SeparatorPolicy:
        """Return a policy inserting nothing."""
        return cls(_types.SeparatorKind.NONE)

    @classmethod
    def from_name(cls, name: str, /) -> SeparatorPolicy:
        """Resolve a user-facing separator name.

        Known names are the keys of [`SEPARATOR_PRESETS`][].
        Additionally, any single character denotes a fixed separator
        consisting of that character.

        Raises:
            ValueError:
                The name is unknown.

        Examples:
            >>> SeparatorPolicy.from_name('hyphen').text
            '-'
            >>> SeparatorPolicy.from_name('+').text
            '+'
            >>> SeparatorPolicy.from_name('digit').kind.value
            'digit'

        """
        try:
            return SEPARATOR_PRESETS[name]
        except KeyError:
            pass
        if isinstance(name, str) and len(name) == 1 and not name.isspace():
            return cls.fixed(name)
        msg = f'invalid separator: {name!r}'
        raise ValueError(msg)

    @property
    def entropy(self) -> float:
        """The entropy contributed per gap, in bits."""
        if self.kind == _types.SeparatorKind.DIGIT:
            return math.log2(len(DIGITS))
        return 0.0

    def next(self, source: randomness.RandomSource, /) -> tuple[str, float]:
        """Produce the separator for one gap between words.

        The digit policy draws exactly once from `source`; the other
        policies never draw.  The reported entropy depends only on the
        policy, never on the drawn digit.

        Args:
            source:
                The random source for randomized policies.

        Returns:
            A 2-tuple of the separator text and the entropy (in bits)
            contributed by choosing it.

        Raises:
            RandomSourceUnavailable:
                The random source failed.

        """
        # Use match/case here once Python 3.9 becomes unsupported.
        if self.kind == _types.SeparatorKind.FIXED:
            return self.text, 0.0
        elif self.kind == _types.SeparatorKind.DIGIT:  # noqa: RET505
            return DIGITS[source.uniform_int(len(DIGITS))], self.entropy
        elif self.kind == _types.SeparatorKind.NONE:
            return '', 0.0
        else:  # pragma: no cover
            assert_never(self.kind)

    def conflicting_characters(self) -> frozenset[str]:
        """Return the characters that words must not contain."""
        if self.kind == _types.SeparatorKind.FIXED:
            return frozenset(self.text.lower())
        if self.kind == _types.SeparatorKind.DIGIT:
            return frozenset(DIGITS)
        return frozenset()

    def conflicts_with(self, word: str, /) -> bool:
        """Return true if `word` contains a separator character.

        The comparison ignores case, and also covers the capitalized
        form of `word`, because words may be capitalized after they
        have been drawn.  Upper-casing may introduce new characters
        (e.g. `'ß'.upper() == 'SS'`).

        Examples:
            >>> SeparatorPolicy.fixed('-').conflicts_with('x-ray')
            True
            >>> SeparatorPolicy.fixed('A').conflicts_with('banana')
            True
            >>> SeparatorPolicy.digit().conflicts_with('route66')
            True
            >>> SeparatorPolicy.fixed('s').conflicts_with('ßa')
            True
            >>> SeparatorPolicy.none().conflicts_with('anything')
            False

        """
        chars = self.conflicting_characters()
        return any(
            not chars.isdisjoint(form.lower())
            for form in (word, capitalize(word))
        )

    def describe(self) -> str:
        """Return a short human-readable description of the policy."""
        if self.kind == _types.SeparatorKind.FIXED:
            return repr(self.text)
        return f'<{self.kind.value}>'


SEPARATOR_PRESETS: Mapping[str, SeparatorPolicy] = types.MappingProxyType({
    'hyphen': SeparatorPolicy.fixed('-'),
    'space': SeparatorPolicy.fixed(' '),
    'comma': SeparatorPolicy.fixed(','),
    'period': SeparatorPolicy.fixed('.'),
    'dot': SeparatorPolicy.fixed('.'),
    'underscore': SeparatorPolicy.fixed('_'),
    'digit': SeparatorPolicy.digit(),
    'none': SeparatorPolicy.none(),
})
"""The named separator presets, by their user-facing names."""
