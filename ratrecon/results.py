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
"""Result types of the rational reconstruction.

Success and failure are not signalled by exceptions but by a three-level
confidence attached to every result:

    GUARANTEED  the denominator bound and the approximation accuracy prove the
                answer is the unique rational with denominator <= B
    PLAUSIBLE   a candidate was found but the proof margin is missing, verify
                it (e.g. by an exact residual check) before use
    FAILED      no candidate, retry with a larger bound or a better
                approximation
"""

from enum import IntEnum
from fractions import Fraction
from typing import Any, List, NamedTuple

import numpy as np
from sympy import Rational

from .names import FAILED, PLAUSIBLE, GUARANTEED

__all__ = ["ReconstructionError", "Confidence", "ReconstructionResult", "VectorReconstruction"]


class ReconstructionError(ArithmeticError):
    """Raised when a result is required at a confidence it does not reach."""


class Confidence(IntEnum):
    """Confidence levels, ordered so that min() combines them."""
    FAILED = 0
    PLAUSIBLE = 1
    GUARANTEED = 2

    @property
    def label(self) -> str:
        return {0: FAILED, 1: PLAUSIBLE, 2: GUARANTEED}[self.value]


def _require(result, min_confidence):
    min_confidence = Confidence(min_confidence)
    if result.confidence < min_confidence:
        raise ReconstructionError("Reconstruction is " + result.confidence.label + ", " + min_confidence.label +
                                  " was required.")
    return result


class ReconstructionResult(NamedTuple):
    """Rational a/b reconstructed from an approximation n/d

    b is positive and gcd(a, b) = 1 unless the confidence is FAILED, in which
    case b is 0.
    """
    a: Any
    b: Any
    confidence: Confidence

    def __bool__(self):
        return self.confidence != Confidence.FAILED

    def require(self, min_confidence: Confidence = Confidence.PLAUSIBLE) -> 'ReconstructionResult':
        """Return self, or raise ReconstructionError if the confidence is below min_confidence."""
        return _require(self, min_confidence)

    def to_fraction(self) -> Fraction:
        self.require()
        return Fraction(int(self.a), int(self.b))

    def to_sympy(self) -> Rational:
        self.require()
        return Rational(int(self.a), int(self.b))


class VectorReconstruction(NamedTuple):
    """Vector num/den of rationals over one common denominator

    On failure num is empty and den is 0, no partial vector is returned.
    """
    num: List[Any]
    den: Any
    confidence: Confidence

    def __bool__(self):
        return self.confidence != Confidence.FAILED

    def require(self, min_confidence: Confidence = Confidence.PLAUSIBLE) -> 'VectorReconstruction':
        """Return self, or raise ReconstructionError if the confidence is below min_confidence."""
        return _require(self, min_confidence)

    def to_fractions(self) -> List[Fraction]:
        self.require()
        den = int(self.den)
        return [Fraction(int(n), den) for n in self.num]

    def to_sympy(self) -> List[Rational]:
        self.require()
        den = int(self.den)
        return [Rational(int(n), den) for n in self.num]

    def to_numpy(self) -> np.ndarray:
        """Convert to numpy float array (correctly rounded, also for huge numerators)."""
        return np.array([float(f) for f in self.to_fractions()], dtype=float)
