import math
import operator

import numpy as np

from alias_errors import (
    EmptyInput,
    InvalidDistribution,
    LengthMismatch,
    SamplingError,
    )

DEFAULT_TOLERANCE = 1e-4


def roll_die(rng, n):
    """Uniform bucket index in [0, n) from a random.Random or a numpy Generator.
    """
    if hasattr(rng, "integers"):
        return int(rng.integers(n))
    if hasattr(rng, "randrange"):
        return rng.randrange(n)
    raise TypeError(
        f"Unsupported random source {type(rng).__name__}: expected "
        "random.Random or numpy.random.Generator."
        )


class AliasTable:
    """
    Vose alias table for O(1) sampling from a fixed discrete distribution.

    Buckets are keyed by position, so elements need not be hashable and
    duplicate elements stay separate buckets. The table is immutable once
    built; sampling only reads it, so one table can be shared between
    threads as long as each thread brings its own random source.

    Attributes:
        elements (tuple): The original elements, in input order.
        probability (tuple of float): Acceptance probability of each bucket's
            own element, in [0, 1].
        alias (tuple): Bucket index returned when the own element is
            rejected, or None for buckets with probability 1.
    """
    def __init__(self, elements, probability, alias):
        """Wraps already computed tables. Use AliasTable.build to construct
        a table from weights; nothing is validated here.
        """
        self._elements = tuple(elements)
        self._probability = tuple(probability)
        self._alias = tuple(alias)
        self._arrays = None

    @classmethod
    def build(cls, elements, weights, tolerance=DEFAULT_TOLERANCE):
        """
        Builds the probability and alias tables in O(n).

        Args:
            elements (sequence): Elements to sample from.
            weights (sequence of float): Probability of each element. Must
                be non-negative and sum to 1 within `tolerance`.
            tolerance (float): Absolute tolerance on the sum of the weights.

        Returns:
            AliasTable

        Raises:
            LengthMismatch, EmptyInput, InvalidDistribution
        """
        if not tolerance >= 0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}.")
        elements = list(elements)
        weights = [float(w) for w in weights]
        if len(elements) != len(weights):
            raise LengthMismatch(
                f"Got {len(elements)} elements but {len(weights)} weights."
                )
        n = len(weights)
        if n == 0:
            raise EmptyInput("Cannot build an alias table from no elements.")
        for i, w in enumerate(weights):
            if not math.isfinite(w) or w < 0.0:
                raise InvalidDistribution(
                    f"Weight {w} at position {i} is not a probability."
                    )
        total = sum(weights)
        if abs(total - 1.0) > tolerance:
            raise InvalidDistribution(
                f"Weights sum to {total}, expected 1 (tolerance {tolerance})."
                )

        q = [w * n for w in weights]
        probability = [0.0] * n
        alias = [None] * n
        smaller, larger = [], []

        for i, qi in enumerate(q):
            if qi < 1.0:
                smaller.append(i)
            else:
                larger.append(i)

        while smaller and larger:
            small = smaller.pop()
            large = larger.pop()
            probability[small] = q[small]
            alias[small] = large
            # large gives away what small is missing
            q[large] = q[large] + q[small] - 1.0
            if q[large] < 1.0:
                smaller.append(large)
            else:
                larger.append(large)

        # Whatever is left is 1 up to rounding.
        for leftover in smaller + larger:
            probability[leftover] = 1.0

        return cls(elements, probability, alias)

    @property
    def elements(self):
        return self._elements

    @property
    def probability(self):
        return self._probability

    @property
    def alias(self):
        return self._alias

    def __len__(self):
        return len(self._elements)

    def _check_consistent(self):
        n = len(self._elements)
        if n == 0:
            raise SamplingError("Cannot sample from an empty alias table.")
        if len(self._probability) != n or len(self._alias) != n:
            raise SamplingError(
                f"Inconsistent alias table: {n} elements, "
                f"{len(self._probability)} probabilities, "
                f"{len(self._alias)} aliases."
                )
        return n

    def select_index(self, die, coin):
        """
        Maps a die roll and a coin flip to a bucket index. No randomness
        is involved, so any (die, coin) pair can be replayed.

        Args:
            die (int): Bucket index in [0, n).
            coin (float): Value in [0, 1).

        Returns:
            int: `die` if the coin is at or below the bucket's probability,
                else the bucket's alias. A probability of 0 never accepts.
        """
        n = self._check_consistent()
        try:
            die = operator.index(die)
        except TypeError:
            raise SamplingError(
                f"Bucket {die!r} is not an integer index.") from None
        if not 0 <= die < n:
            raise SamplingError(f"Bucket {die} is outside a table of {n}.")
        p = self._probability[die]
        if coin <= p and p > 0.0:
            return die
        alias = self._alias[die]
        if alias is None or not 0 <= alias < n:
            raise SamplingError(f"No valid alias for bucket {die}.")
        return alias

    def select(self, die, coin):
        """Like select_index, but returns the element."""
        return self._elements[self.select_index(die, coin)]

    def sample_index(self, rng):
        n = self._check_consistent()
        die = roll_die(rng, n)
        coin = rng.random()
        return self.select_index(die, coin)

    def sample(self, rng):
        """
        Draws one element: one die roll and one coin flip from `rng`.

        Args:
            rng: random.Random or numpy.random.Generator.
        """
        return self._elements[self.sample_index(rng)]

    def to_arrays(self):
        """
        Returns:
            (np.ndarray, np.ndarray): float64 probabilities and int64
                aliases, with probability-1 buckets aliased to themselves.
        """
        probability, alias = self._resolved_arrays()
        return probability.copy(), alias.copy()

    def _resolved_arrays(self):
        if self._arrays is None:
            n = self._check_consistent()
            alias = np.arange(n, dtype=np.int64)
            for i, (p, a) in enumerate(zip(self._probability, self._alias)):
                if a is not None and 0 <= a < n:
                    alias[i] = a
                elif p < 1.0:
                    raise SamplingError(f"No valid alias for bucket {i}.")
            self._arrays = (
                np.asarray(self._probability, dtype=np.float64),
                alias,
                )
        return self._arrays

    def sample_indices(self, rng, size):
        """
        Draws `size` bucket indices at once. With a numpy Generator the dice
        and coins are drawn as vectors; a random.Random is drawn one by one.
        """
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}.")
        n = self._check_consistent()
        if not hasattr(rng, "integers"):
            return np.array(
                [self.sample_index(rng) for _ in range(size)],
                dtype=np.int64
                )
        probability, alias = self._resolved_arrays()
        dice = rng.integers(0, n, size=size)
        coins = rng.random(size)
        p = probability[dice]
        return np.where((coins <= p) & (p > 0.0), dice, alias[dice])

    def sample_n(self, rng, size):
        return [self._elements[i] for i in self.sample_indices(rng, size)]

    def __eq__(self, other):
        if not isinstance(other, AliasTable):
            return NotImplemented
        return (self._elements == other._elements
                and self._probability == other._probability
                and self._alias == other._alias)

    def __repr__(self):
        return (f"AliasTable(elements={list(self._elements)!r}, "
                f"probability={list(self._probability)!r}, "
                f"alias={list(self._alias)!r})")

    def __str__(self):
        rows = [("bucket", "element", "probability", "alias")]
        for i, (e, p, a) in enumerate(
                zip(self._elements, self._probability, self._alias)):
            if a is None:
                alias_txt = "-"
            elif 0 <= a < len(self._elements):
                alias_txt = f"{self._elements[a]!r} [{a}]"
            else:
                alias_txt = f"[{a}]"
            rows.append((str(i), repr(e), f"{p:.6f}", alias_txt))
        widths = [max(len(row[c]) for row in rows) for c in range(4)]
        lines = []
        for row in rows:
            line = "  ".join(cell.ljust(w) for cell, w in zip(row, widths))
            lines.append(line.rstrip())
        return "\n".join(lines)


def build(elements, weights, tolerance=DEFAULT_TOLERANCE):
    return AliasTable.build(elements, weights, tolerance)


def sample(table, rng):
    return table.sample(rng)
