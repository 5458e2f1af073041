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
"""Integer ring backends for rational reconstruction.

The reconstruction algorithms never touch a concrete integer type. They receive
an IntegerRing and do all quotient, remainder, comparison and lcm work through
it, so any arbitrary-precision integer implementation can be plugged in.

Backends: built-in int (always available), FLINT fmpz (fast) and the sympy ZZ
domain. Its elements are of sympy's ground type: fmpz when python-flint is
installed (as it is with this package), else gmpy2 mpz or int.

Example usage:
    >>> from ratrecon.rings import get_ring
    >>> Z = get_ring('python')
    >>> Z.quo_rem(Z.init(13), Z.init(20))
    (0, 13)
"""

import logging
import math
import operator
from abc import ABC, abstractmethod
from importlib.util import find_spec as module_exists
from typing import Any, Optional, Tuple, Union

from .names import PYTHON, FLINT, SYMPY, BACKEND_PRIORITY

# Backend detection - ONLY place flint is imported in the ratrecon package
try:
    from flint import fmpz
    FLINT_AVAILABLE = True
except ImportError:
    FLINT_AVAILABLE = False
    fmpz = None

LOG = logging.getLogger(__name__)

__all__ = [
    "FLINT_AVAILABLE", "avail_backends", "IntegerRing", "PythonIntegerRing", "FlintIntegerRing", "SympyIntegerRing",
    "select_backend", "get_ring", "check_positive"
]

avail_backends = {PYTHON}
if FLINT_AVAILABLE:
    avail_backends.add(FLINT)
if module_exists("sympy"):
    avail_backends.add(SYMPY)


class IntegerRing(ABC):
    """Arbitrary-precision integer ring used by the reconstruction algorithms

    Subclasses only have to provide the element constructor. Every other
    operation is written against Python's number protocol and may be
    overridden where the element type offers something faster.
    """

    name = None
    _instance = None

    @classmethod
    def get_instance(cls) -> 'IntegerRing':
        """Get singleton instance of this ring."""
        if cls.__dict__.get('_instance') is None:
            cls._instance = cls()
        return cls._instance

    @abstractmethod
    def init(self, value: Any = 0) -> Any:
        """Create a ring element from an integer-like value (int, numpy integer, ...)."""
        pass

    def assign(self, value: Any) -> Any:
        """Return an element of this ring equal to value, which may belong to another backend."""
        return self.init(int(value))

    @property
    def zero(self) -> Any:
        return self.init(0)

    @property
    def one(self) -> Any:
        return self.init(1)

    def add(self, a, b):
        return a + b

    def sub(self, a, b):
        return a - b

    def mul(self, a, b):
        return a * b

    def negate(self, a):
        return -a

    def abs(self, a):
        return abs(a)

    def compare(self, a, b) -> int:
        """Return -1, 0 or 1 if a is less than, equal to or greater than b."""
        return (a > b) - (a < b)

    def is_negative(self, a) -> bool:
        return a < 0

    def quo_rem(self, a, b) -> Tuple[Any, Any]:
        """Floor quotient and remainder, a = q*b + r with r having the sign of b."""
        return divmod(a, b)

    def quo(self, a, b):
        """Quotient of a division known to be exact."""
        return a // b

    def gcd(self, a, b):
        return self.init(math.gcd(int(a), int(b)))

    def lcm(self, a, b):
        """Non-negative least common multiple, zero if either argument is zero."""
        if not a or not b:
            return self.zero
        return self.abs(self.quo(a, self.gcd(a, b)) * b)

    def to_int(self, a) -> int:
        return int(a)

    def bit_length(self, a) -> int:
        """Number of bits of |a|, without a decimal conversion."""
        return self.to_int(a).bit_length()

    def __repr__(self):
        return f"{type(self).__name__}()"


class PythonIntegerRing(IntegerRing):
    """Ring of Python's built-in int."""

    name = PYTHON

    def init(self, value: Any = 0) -> int:
        return operator.index(value)

    def gcd(self, a, b):
        return math.gcd(a, b)

    def lcm(self, a, b):
        return math.lcm(a, b)


class FlintIntegerRing(IntegerRing):
    """Ring of FLINT fmpz integers (python-flint)."""

    name = FLINT

    def __init__(self):
        if not FLINT_AVAILABLE:
            raise RuntimeError("FLINT not available")

    def init(self, value: Any = 0) -> 'fmpz':
        return fmpz(operator.index(value))

    def gcd(self, a, b):
        return a.gcd(b)


class SympyIntegerRing(IntegerRing):
    """Ring of integers given by sympy's ZZ domain.

    Elements are of sympy's ground type, selected by SYMPY_GROUND_TYPES: fmpz
    if python-flint is installed, otherwise gmpy2 mpz or int.
    """

    name = SYMPY

    def __init__(self):
        # only imported when this backend is requested
        from sympy.polys.domains import ZZ
        self.domain = ZZ

    def init(self, value: Any = 0):
        return self.domain(operator.index(value))

    def quo_rem(self, a, b):
        return self.domain.div(a, b)

    def gcd(self, a, b):
        return self.domain.gcd(a, b)

    def lcm(self, a, b):
        return self.domain.lcm(a, b)


RINGS = {
    PYTHON: PythonIntegerRing,
    FLINT: FlintIntegerRing,
    SYMPY: SympyIntegerRing,
}


def select_backend(backend: Optional[str] = None) -> str:
    """Select an integer backend for subsequent reconstructions

    If a backend is given, it is checked for availability and returned. If it is
    not installed, a warning is logged and the first available backend in the
    order 'flint', 'sympy', 'python' is used instead. Without argument, that
    prioritized choice is returned directly.

    Example:
        backend = select_backend('flint')

    Args:
        backend (optional (str)):

            A user preferred backend: 'flint', 'sympy' or 'python'.

    Returns:
        (str):

            The selected backend name.
    """
    if backend:
        if backend not in RINGS:
            raise ValueError("Unknown integer backend '" + str(backend) + "'. Choose one of " +
                             ", ".join(BACKEND_PRIORITY) + ".")
        if backend in avail_backends:
            return backend
    fallback = next(b for b in BACKEND_PRIORITY if b in avail_backends)
    if backend:
        LOG.warning('Selected backend ' + backend + ' not available. Using ' + fallback + ' instead.')
    return fallback


def get_ring(ring: Union[IntegerRing, str, None] = None) -> IntegerRing:
    """Resolve a ring argument to an IntegerRing

    Args:
        ring (optional (IntegerRing or str)):

            A ring instance, which is returned unchanged, the name of a backend,
            or None to use the default backend (see select_backend).

    Returns:
        (IntegerRing):

            The ring to compute in.
    """
    if isinstance(ring, IntegerRing):
        return ring
    return RINGS[select_backend(ring)].get_instance()


def check_positive(Z: IntegerRing, **kwargs) -> None:
    """Raise ValueError unless every keyword argument is a positive ring element."""
    for key, value in kwargs.items():
        if Z.compare(value, Z.zero) <= 0:
            sign = "zero" if not value else "negative"
            raise ValueError("Argument " + key + " must be positive, got a " + sign + " value.")
