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
"""Reconstruction of a single rational a/b from an approximation n/d.

If the true value a/b has b <= B and d >= b*B, then a/b is the only rational
with denominator <= B within 1/(2d) of n/d. Two distinct such fractions
differ by at least 1/(b*B) >= 1/d, so they cannot both lie within 1/(2d) of
the same approximation. dyadic_to_rational returns that fraction, flagged
GUARANTEED when b*B < d.

See "Symbolic-Numeric Exact Rational Linear System Solver" by Saunders, Wood
and Youse for the construction.
"""

import logging

from .hegcd import partial_hegcd
from .results import Confidence, ReconstructionResult
from .rings import IntegerRing, check_positive, get_ring

LOG = logging.getLogger(__name__)

__all__ = ["dyadic_to_rational", "reconstruct_in_ring"]


def reconstruct_in_ring(Z: IntegerRing, n, d, den_bound) -> ReconstructionResult:
    """Reconstruct n/d like dyadic_to_rational, with arguments already in Z and checked."""
    an = Z.abs(n)
    e, b, found = partial_hegcd(Z, an, d, den_bound)  # e = b*an - a*d, |b| <= den_bound
    a = Z.quo(Z.sub(e, Z.mul(b, an)), d)  # exact
    # a/b is the solution, up to signs
    b = Z.abs(b)
    a = Z.abs(a)
    if Z.is_negative(n):
        a = Z.negate(a)

    if not b:
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug("Reconstruction of a %d-bit numerator over a %d-bit denominator failed.", Z.bit_length(n),
                      Z.bit_length(d))
        return ReconstructionResult(a, b, Confidence.FAILED)
    if found and Z.compare(Z.mul(b, den_bound), d) < 0:
        return ReconstructionResult(a, b, Confidence.GUARANTEED)
    return ReconstructionResult(a, b, Confidence.PLAUSIBLE)


def dyadic_to_rational(n, d, den_bound, ring=None) -> ReconstructionResult:
    """Reconstruct a rational a/b from an approximation n/d with denominator bound

    Gives the continued fraction approximant a/b of n/d that satisfies
    |a/b - n/d| <= 1/(2d) (well approximated) and 0 < b <= den_bound. If no
    approximant is well approximated, the last one with b <= den_bound is
    given for speculative use.

    Example:
        a, b, confidence = dyadic_to_rational(13, 20, 5)  # (2, 3, Confidence.GUARANTEED)

    Args:
        n (int):

            Numerator of the approximation, of either sign.

        d (int):

            Positive denominator of the approximation, typically a power of two.

        den_bound (int):

            Positive bound B on the denominator of the rational to reconstruct.

        ring (optional (IntegerRing or str)):

            Integer ring, or name of a backend ('flint', 'sympy', 'python'). By
            default the fastest available backend is used.

    Returns:
        (ReconstructionResult):

            Named tuple (a, b, confidence) with gcd(a, b) = 1. The confidence is
            GUARANTEED if a/b was found and b*den_bound < d, PLAUSIBLE if a/b may be
            used speculatively (not well approximated, or a second well
            approximated rational with denominator <= den_bound may exist) and
            FAILED (with b = 0) if there is no approximant.
    """
    Z = get_ring(ring)
    n, d, den_bound = Z.init(n), Z.init(d), Z.init(den_bound)
    check_positive(Z, d=d, den_bound=den_bound)
    return reconstruct_in_ring(Z, n, d, den_bound)
