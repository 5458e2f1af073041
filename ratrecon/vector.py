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
"""Reconstruction of a vector of rationals over one common denominator.

The common denominator starts at 1 and only grows when a coordinate cannot be
expressed over the current one. Each growth would make all earlier numerators
stale. Instead of rescaling them at once, the growth is recorded as a deferred
multiplier and all records are applied in a single backward pass at the end.
"""

import logging
from typing import Any, List, NamedTuple

import numpy as np

from .results import Confidence, VectorReconstruction
from .rings import IntegerRing, check_positive, get_ring
from .scalar import reconstruct_in_ring

LOG = logging.getLogger(__name__)

__all__ = [
    "DeferredMultiplier", "VectorReconstructionState", "balanced_quo_rem", "dyadic_to_rational_vector",
    "reconstruct_vector_independent"
]


def _size(Z: IntegerRing, a) -> str:
    """Decimal text of a for log messages, or only its bit length when a is large."""
    bits = Z.bit_length(a)
    if bits <= 64:
        return str(Z.to_int(a))
    return str(bits) + "-bit integer"


class DeferredMultiplier(NamedTuple):
    """Denominator growth at coordinate boundary, not yet applied to coordinates < boundary."""
    boundary: int
    multiplier: Any


class VectorReconstructionState:
    """Working state of one vector reconstruction."""

    def __init__(self, Z: IntegerRing):
        self.Z = Z
        self.den = Z.one
        self.num = []
        # sentinel record, so that every real record has a predecessor boundary
        self.deferred = [DeferredMultiplier(0, Z.one)]
        self.confidence = Confidence.GUARANTEED

    def grow(self, boundary: int, new_den) -> None:
        """Switch to the multiple new_den of the current denominator."""
        Z = self.Z
        self.deferred.append(DeferredMultiplier(boundary, Z.quo(new_den, self.den)))
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug("Common denominator grows from %s to %s at coordinate %d.", _size(Z, self.den), _size(Z, new_den),
                      boundary)
        self.den = new_den

    def apply_deferred(self) -> None:
        """Bring all numerators to the final denominator."""
        Z = self.Z
        t = Z.one
        for k in range(len(self.deferred) - 1, 0, -1):
            boundary, multiplier = self.deferred[k]
            t = Z.mul(t, multiplier)
            for j in range(self.deferred[k - 1].boundary, boundary):
                self.num[j] = Z.mul(self.num[j], t)
        LOG.debug("Applied %d deferred denominator multipliers.", len(self.deferred) - 1)
        del self.deferred[1:]


def _as_vector(Z: IntegerRing, numx) -> List[Any]:
    arr = np.asarray(numx, dtype=object)
    if arr.ndim != 1:
        raise ValueError("Expected a one-dimensional vector of numerators, got shape " + str(arr.shape) + ".")
    return [Z.init(x) for x in arr]


def balanced_quo_rem(Z: IntegerRing, a, m, half):
    """Quotient and remainder a = q*m + e, rounded up as soon as e reaches half

    half is m // 2, computed once by the caller. A remainder of exactly half
    gives the larger quotient, for odd m that leaves e = -(half + 1).
    """
    q, e = Z.quo_rem(a, m)
    if Z.compare(e, half) >= 0:
        q = Z.add(q, Z.one)
        e = Z.sub(e, m)
    return q, e


def _failed(Z: IntegerRing) -> VectorReconstruction:
    return VectorReconstruction([], Z.zero, Confidence.FAILED)


def dyadic_to_rational_vector(numx, denx, den_bound, ring=None) -> VectorReconstruction:
    """Reconstruct rationals num[i]/den from approximations numx[i]/denx

    Every coordinate is first tried over the current common denominator den.
    Only when numx[i]/denx is not within 1/(2*denx) of a fraction over den, the
    coordinate is reconstructed on its own (see dyadic_to_rational) and den
    becomes the lcm of den and the new denominator.

    Example:
        num, den, confidence = dyadic_to_rational_vector([80, -90], 120, 12)  # ([8, -9], 12, ...)

    Args:
        numx (list of int or numpy.ndarray):

            Numerators of the approximations, of either sign.

        denx (int):

            Positive denominator shared by all approximations.

        den_bound (int):

            Positive bound on the common denominator to reconstruct.

        ring (optional (IntegerRing or str)):

            Integer ring, or name of a backend ('flint', 'sympy', 'python').

    Returns:
        (VectorReconstruction):

            Named tuple (num, den, confidence). The confidence is the lowest one of
            all coordinates that needed their own reconstruction, GUARANTEED if
            none did. If any coordinate fails, or den exceeds den_bound, the whole
            reconstruction is FAILED and num is empty.
    """
    Z = get_ring(ring)
    numx = _as_vector(Z, numx)
    denx, den_bound = Z.init(denx), Z.init(den_bound)
    check_positive(Z, denx=denx, den_bound=den_bound)

    denx2 = Z.quo(denx, Z.init(2))  # for balancing remainders
    state = VectorReconstructionState(Z)
    for i, x in enumerate(numx):
        nx = Z.abs(x)
        q, e = balanced_quo_rem(Z, Z.mul(nx, state.den), denx, denx2)  # nx*den = q*denx + e
        # |nx/denx - q/den| = |e|/(den*denx) must not exceed 1/(2*denx)
        if Z.compare(2 * Z.abs(e), state.den) > 0:
            a, b, confidence = reconstruct_in_ring(Z, nx, denx, den_bound)
            if confidence == Confidence.FAILED:
                LOG.debug("Coordinate %d could not be reconstructed.", i)
                return _failed(Z)
            new_den = Z.lcm(state.den, b)
            q = Z.mul(a, Z.quo(new_den, b))
            state.grow(i, new_den)
            state.confidence = min(state.confidence, confidence)
            if Z.compare(state.den, den_bound) > 0:
                if LOG.isEnabledFor(logging.DEBUG):
                    LOG.debug("Common denominator %s exceeds bound %s.", _size(Z, state.den), _size(Z, den_bound))
                return _failed(Z)
        if Z.is_negative(x):
            q = Z.negate(q)
        state.num.append(q)

    state.apply_deferred()
    return VectorReconstruction(state.num, state.den, state.confidence)


def reconstruct_vector_independent(numx, denx, den_bound, ring=None) -> VectorReconstruction:
    """Reconstruct every coordinate on its own, then rescale to the lcm of all denominators

    Same arguments and result as dyadic_to_rational_vector, but one scalar
    reconstruction is run per coordinate. Slower, useful as a cross-check.
    """
    Z = get_ring(ring)
    numx = _as_vector(Z, numx)
    denx, den_bound = Z.init(denx), Z.init(den_bound)
    check_positive(Z, denx=denx, den_bound=den_bound)

    den = Z.one
    confidence = Confidence.GUARANTEED
    parts = []
    for i, x in enumerate(numx):
        part = reconstruct_in_ring(Z, x, denx, den_bound)
        if part.confidence == Confidence.FAILED:
            LOG.debug("Coordinate %d could not be reconstructed.", i)
            return _failed(Z)
        den = Z.lcm(den, part.b)
        confidence = min(confidence, part.confidence)
        parts.append(part)
    if Z.compare(den, den_bound) > 0:
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug("Common denominator %s exceeds bound %s.", _size(Z, den), _size(Z, den_bound))
        return _failed(Z)
    return VectorReconstruction([Z.mul(a, Z.quo(den, b)) for a, b, _ in parts], den, confidence)
