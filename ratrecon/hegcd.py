#!/usr/bin/env python3
#
# Copyright 2022 Max Planck Insitute Magdeburg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
#
"""Partial half-extended gcd: the bounded continued-fraction convergent search."""

import logging
from typing import Any, Iterator, NamedTuple, Tuple

from .rings import IntegerRing

LOG = logging.getLogger(__name__)

__all__ = ["Convergent", "partial_hegcd", "remainder_sequence"]


class Convergent(NamedTuple):
    """Entry (r, b) of the remainder sequence of n, d with r = b*n - a*d."""
    r: Any
    b: Any


def partial_hegcd(Z: IntegerRing, n, d, den_bound) -> Tuple[Any, Any, bool]:
    """Search the remainder sequence of n, d for a well approximated convergent

    Walks the Euclidean remainder sequence of the positive integers n and d,
    keeping only the coefficient b of n (the coefficient of d is never formed),
    and stops at the first remainder r with 2*r <= |b| and |b| <= den_bound.

    If the bound is exceeded first, the last entry with |b| <= den_bound is
    returned instead. Its b is the denominator of a plausibly, but not well,
    approximated rational that can be used speculatively.

    Args:
        Z (IntegerRing): Ring the arguments live in.
        n: Non-negative numerator.
        d: Positive denominator.
        den_bound: Positive bound on |b|.

    Returns:
        (Tuple): (r, b, found) where found is True iff a well approximated
        in-bound convergent was reached. b may be negative.
    """
    b0, r0 = Z.one, n  # a0 = 0
    b1, r1 = Z.zero, d  # a1 = 1
    while True:
        quo, e = Z.quo_rem(r0, r1)
        b = Z.sub(b0, Z.mul(quo, b1))
        r0, b0 = r1, b1
        r1, b1 = e, b
        within_bound = Z.compare(Z.abs(b1), den_bound) <= 0
        # a zero remainder is always well approximated, so r1 is never a zero divisor
        well_approximated = Z.compare(2 * r1, Z.abs(b1)) <= 0
        if well_approximated or not within_bound:
            break
    if not within_bound:
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug("Denominator bound (%d bits) exceeded before a well approximated convergent.",
                      Z.bit_length(den_bound))
        return r0, b0, False
    return r1, b1, True


def remainder_sequence(Z: IntegerRing, n, d) -> Iterator[Convergent]:
    """Yield every convergent (r, b) of n, d until the remainder vanishes.

    Uses the same recursion as partial_hegcd without any stopping criterion.
    """
    b0, r0 = Z.one, n
    b1, r1 = Z.zero, d
    while r1:
        quo, e = Z.quo_rem(r0, r1)
        b = Z.sub(b0, Z.mul(quo, b1))
        r0, b0 = r1, b1
        r1, b1 = e, b
        yield Convergent(r1, b1)
