# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Uniformly distributed random integers from a stream of random bits.

All random decisions during passphrase generation go through a
[`RandomSource`][]: a single method, `uniform_int(n)`, returning an
integer in the range 0, ..., `n` - 1.  The production implementation,
[`SecureRandomSource`][], draws its bits from the operating system's
cryptographically secure random number generator (via the [`secrets`][]
module) and converts them to the requested range using rejection
sampling, so that there is no modulo bias.  [`FixedBitsRandomSource`][]
runs the very same conversion on a fixed, caller-supplied bit sequence;
it exists for reproducible tests.

"""

from __future__ import annotations

import abc
import collections
import os
import secrets
import threading
from typing import TYPE_CHECKING, Protocol

from typing_extensions import assert_type

from mkpw import _types

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

__all__ = (
    'BitStreamRandomSource',
    'FixedBitsRandomSource',
    'RandomSource',
    'RandomSourceExhaustedError',
    'RandomSourceUnavailable',
    'SecureRandomSource',
    'default_source',
)


class RandomSourceUnavailable(_types.GenerationError, RuntimeError):  # noqa: N818
    """The random source cannot produce any more values.

    For [`SecureRandomSource`][], this means that the operating system's
    random number generator could not be read.  This is fatal: we never
    fall back to a non-cryptographic generator, and we never retry.

    """


class RandomSourceExhaustedError(RandomSourceUnavailable):
    """The (finite) random source is exhausted."""

    def __init__(self) -> None:  # noqa: D107
        super().__init__('Random source is exhausted')


class RandomSource(Protocol):
    """A source of uniformly distributed random integers."""

    def uniform_int(self, n: int, /) -> int:
        """Return a uniformly random integer in the range 0, ..., `n` - 1.

        Args:
            n:
                The size of the range.  Must be positive.

        Raises:
            RandomSourceUnavailable:
                No random value can be produced.
            TypeError:
                `n` is not an integer.
            ValueError:
                The range is empty.

        """


class BitStreamRandomSource(abc.ABC):
    """Generate uniformly random integers from a stream of random bits.

    The bits are requested from the [`_refill`][] hook in chunks, and
    consumed most significant bit first.  A request for a base `n`
    integer takes `k` bits, where `k` is the smallest integer such that
    `2 ** k >= n`, and interprets them as a big endian number.  If the
    number is out of range, it is rejected, and another `k` bits are
    taken.  Rejected samples are discarded, not recycled.

    Access to the bit buffer is serialized with a lock, so a single
    instance may be shared by concurrent threads.

    Attributes:
        draws:
            The number of calls to [`uniform_int`][] so far.
        bits_consumed:
            The number of random bits consumed so far.

    """

    def __init__(self) -> None:
        """Initialize the source, with an empty bit buffer."""
        self._bits: collections.deque[int] = collections.deque()
        self._lock = threading.Lock()
        self.draws = 0
        self.bits_consumed = 0

    @abc.abstractmethod
    def _refill(self) -> bytes:
        """Return the next chunk of random bytes.

        Subclasses must implement this.  An empty result signals the
        end of the stream.

        Raises:
            RandomSourceUnavailable:
                The underlying entropy pool cannot be read.

        """

    @staticmethod
    def _uint8_to_bits(value: int, /) -> Iterator[int]:
        """Yield individual bits of an 8-bit number, MSB first."""
        for i in (0x80, 0x40, 0x20, 0x10, 0x08, 0x04, 0x02, 0x01):
            yield 1 if value | i == value else 0

    def _take_bits(self, count: int, /) -> Sequence[int]:
        """Consume and return `count` bits, refilling as necessary.

        If the stream ends before enough bits are available, consume
        nothing, and raise.

        Raises:
            RandomSourceExhaustedError:
                The stream ended.

        """
        while len(self._bits) < count:
            chunk = self._refill()
            if not chunk:
                raise RandomSourceExhaustedError
            for byte in chunk:
                self._bits.extend(self._uint8_to_bits(byte))
        self.bits_consumed += count
        return tuple(self._bits.popleft() for _ in range(count))

    @staticmethod
    def _big_endian_number(bits: Sequence[int], /) -> int:
        """Evaluate the given bit sequence as a big endian number.

        Examples:
            >>> BitStreamRandomSource._big_endian_number([1, 0, 0, 1])
            9
            >>> BitStreamRandomSource._big_endian_number([])
            0

        """
        ret = 0
        for bit in bits:
            ret = (ret << 1) | bit
        return ret

    def uniform_int(self, n: int, /) -> int:
        """Return a uniformly random integer in the range 0, ..., `n` - 1.

        Using `n = 1` does not consume any bits.

        Args:
            n:
                The size of the range.  Must be positive.

        Returns:
            A uniformly random number in the range 0, ..., `n` - 1.

        Raises:
            RandomSourceUnavailable:
                The bit stream could not be read, or is exhausted.
            TypeError:
                `n` is not an integer.
            ValueError:
                The range is empty.

        Examples:
            >>> source = FixedBitsRandomSource(
            ...     [1, 1, 0, 1, 0, 1, 0, 1, 1, 1, 1, 1, 0, 0, 1],
            ...     is_bitstring=True,
            ... )
            >>> source.uniform_int(5)
            3
            >>> source.uniform_int(5)
            1
            >>> source.uniform_int(1)
            0
            >>> source.uniform_int(2)  # doctest: +IGNORE_EXCEPTION_DETAIL
            Traceback (most recent call last):
                ...
            RandomSourceExhaustedError: Random source is exhausted

        """
        if not isinstance(n, int) or isinstance(n, bool):
            msg = f'not an integer: {n!r}'
            raise TypeError(msg)
        if n < 1:
            msg = 'invalid target range'
            raise ValueError(msg)
        # k is the smallest integer such that 2 ** k >= n.
        k = (n - 1).bit_length()
        with self._lock:
            self.draws += 1
            while True:
                value = self._big_endian_number(self._take_bits(k))
                if value < n:
                    return value


class SecureRandomSource(BitStreamRandomSource):
    """A random source backed by the operating system's secure RNG.

    Bits are read via [`secrets.token_bytes`][] (i.e.,
    [`os.urandom`][]) in chunks of [`CHUNK_SIZE`][] bytes.  A forked
    child process discards any bits buffered by its parent, so that
    the two processes never share random decisions.

    """

    CHUNK_SIZE = 32
    """The number of bytes requested from the OS at a time."""

    def __init__(self) -> None:  # noqa: D107
        super().__init__()
        self._pid = os.getpid()

    def _refill(self) -> bytes:
        try:
            return secrets.token_bytes(self.CHUNK_SIZE)
        except (OSError, NotImplementedError) as exc:
            msg = f'cannot read from the system random number generator: {exc}'
            raise RandomSourceUnavailable(msg) from exc

    def _take_bits(self, count: int, /) -> Sequence[int]:
        pid = os.getpid()
        if pid != self._pid:
            self._bits.clear()
            self._pid = pid
        return super()._take_bits(count)


class FixedBitsRandomSource(BitStreamRandomSource):
    """A random source reading from a fixed, finite bit sequence.

    Useful for reproducible tests: the same input bits always yield the
    same sequence of random integers.  Never use this for actual
    passphrases.

    """

    def __init__(
        self,
        sequence: str | bytes | bytearray | Sequence[int],
        /,
        *,
        is_bitstring: bool = False,
    ) -> None:
        """Initialize the source.

        Args:
            sequence:
                A sequence of bits, or things convertible to bits.
                Byte and text strings are converted to 8-bit integer
                sequences.  (Conversion will fail if the text string
                contains non-ISO-8859-1 characters.)  The numbers are
                then converted to bits.
            is_bitstring:
                If true, treat the input as a bitstring.  By default,
                the input is treated as a string of 8-bit integers,
                from which the individual bits must still be extracted.

        Raises:
            ValueError:
                The sequence contains values outside the permissible
                range.

        """
        super().__init__()
        msg = 'sequence item out of range'
        if isinstance(sequence, str):
            try:
                sequence = tuple(sequence.encode('iso-8859-1'))
            except UnicodeError as e:
                raise ValueError(msg) from e
        else:
            sequence = tuple(sequence)
        assert_type(sequence, tuple[int, ...])
        for num in sequence:
            if num not in range(2 if is_bitstring else 256):
                raise ValueError(msg)
            if is_bitstring:
                self._bits.append(num)
            else:
                self._bits.extend(self._uint8_to_bits(num))

    def _refill(self) -> bytes:
        return b''


_default_source = SecureRandomSource()


def default_source() -> SecureRandomSource:
    """Return the process-wide secure random source."""
    return _default_source
