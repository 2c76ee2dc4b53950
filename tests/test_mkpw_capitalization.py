# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Test capitalization policies."""

from __future__ import annotations

import math

import hypothesis
import pytest
from hypothesis import strategies

import tests
from mkpw import randomness
from mkpw.capitalization import CapitalizationPolicy, capitalize

WORDS = ('apple', 'banana', 'cherry', 'date')


class TestDeterministicSchemes:
    """Test the schemes that do not draw randomness."""

    @pytest.mark.parametrize(
        ['policy', 'expected'],
        [
            (CapitalizationPolicy.NONE, ('apple', 'banana', 'cherry', 'date')),
            (
                CapitalizationPolicy.FIRST,
                ('Apple', 'banana', 'cherry', 'date'),
            ),
            (CapitalizationPolicy.ALL, ('Apple', 'Banana', 'Cherry', 'Date')),
        ],
    )
    def test_200_apply(
        self,
        policy: CapitalizationPolicy,
        expected: tuple[str, ...],
    ) -> None:
        """Deterministic schemes never draw, and carry no entropy."""
        source = tests.ScriptedRandomSource()
        assert policy.apply(WORDS, source) == (expected, 0.0)
        assert source.draws == 0
        assert not policy.is_random

    @hypothesis.given(words=strategies.lists(tests.plain_words, min_size=1))
    def test_201_case_of_results(self, words: list[str]) -> None:
        """NONE keeps all words lowercase, ALL capitalizes all of them."""
        source = tests.ScriptedRandomSource()
        none, _ = CapitalizationPolicy.NONE.apply(words, source)
        assert all(w.islower() for w in none)
        every, _ = CapitalizationPolicy.ALL.apply(words, source)
        assert all(w[:1].isupper() and w[1:] == w[1:].lower() for w in every)
        first, _ = CapitalizationPolicy.FIRST.apply(words, source)
        assert first[0] == every[0]
        assert first[1:] == none[1:]


class TestRandomSchemes:
    """Test the schemes that draw randomness."""

    @pytest.mark.parametrize('pos', range(len(WORDS)))
    def test_200_one(self, pos: int) -> None:
        """ONE capitalizes the word at a single drawn position."""
        source = tests.ScriptedRandomSource([pos])
        result, entropy = CapitalizationPolicy.ONE.apply(WORDS, source)
        assert source.requests == [len(WORDS)]
        assert entropy == 2.0
        assert [w != w.lower() for w in result] == [
            i == pos for i in range(len(WORDS))
        ]

    def test_201_random(self) -> None:
        """RANDOM flips one fair coin per word."""
        source = tests.ScriptedRandomSource([1, 0, 0, 1])
        result, entropy = CapitalizationPolicy.RANDOM.apply(WORDS, source)
        assert result == ('Apple', 'banana', 'cherry', 'Date')
        assert entropy == 4.0
        assert source.requests == [2, 2, 2, 2]

    def test_202_failing_source(self) -> None:
        """Random source failures propagate."""
        source = tests.FailingRandomSource()
        with pytest.raises(randomness.RandomSourceUnavailable):
            CapitalizationPolicy.ONE.apply(WORDS, source)
        assert source.draws == 1


class TestEntropy:
    """Test the entropy figures."""

    @hypothesis.given(size=strategies.integers(min_value=1, max_value=1000))
    def test_200_entropy(self, size: int) -> None:
        """Entropy depends only on the scheme and the word count."""
        assert CapitalizationPolicy.NONE.entropy(size) == 0.0
        assert CapitalizationPolicy.FIRST.entropy(size) == 0.0
        assert CapitalizationPolicy.ALL.entropy(size) == 0.0
        assert math.isclose(
            CapitalizationPolicy.ONE.entropy(size), math.log2(size)
        )
        assert CapitalizationPolicy.RANDOM.entropy(size) == float(size)

    def test_201_single_word(self) -> None:
        """Capitalizing one of one word carries no entropy."""
        assert CapitalizationPolicy.ONE.entropy(1) == 0.0

    @pytest.mark.parametrize('size', [0, -1])
    def test_300_entropy_invalid_size(self, size: int) -> None:
        """Word counts must be positive."""
        with pytest.raises(ValueError, match='invalid word count'):
            CapitalizationPolicy.ONE.entropy(size)

    def test_301_apply_no_words(self) -> None:
        """There must be words to capitalize."""
        with pytest.raises(ValueError, match='no words'):
            CapitalizationPolicy.NONE.apply([], tests.ScriptedRandomSource())


class TestNames:
    """Test user-facing scheme names."""

    @pytest.mark.parametrize('policy', list(CapitalizationPolicy))
    def test_200_from_name(self, policy: CapitalizationPolicy) -> None:
        """Every scheme is known by its value."""
        assert CapitalizationPolicy.from_name(policy.value) is policy

    @pytest.mark.parametrize('name', ['', 'ONE', 'upper', 'title'])
    def test_300_from_name_invalid(self, name: str) -> None:
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match='invalid capitalization scheme'):
            CapitalizationPolicy.from_name(name)

    def test_400_capitalize(self) -> None:
        """Only the first character is changed."""
        assert capitalize('apple') == 'Apple'
        assert capitalize('mcDonald') == 'McDonald'
        assert capitalize('') == ''
        assert capitalize('éclair') == 'Éclair'
