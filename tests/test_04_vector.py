"""Test reconstruction of rational vectors over a common denominator."""
import logging
import random
from fractions import Fraction
from math import lcm
import numpy as np
import pytest
import ratrecon as rr
from ratrecon import (Confidence, ReconstructionResult, VectorReconstructionState, balanced_quo_rem,
                      dyadic_to_rational, dyadic_to_rational_vector, reconstruct_vector_independent)


def round_half_away(num: int, den: int) -> int:
    """Nearest integer to num/den, ties rounded away from zero."""
    q = (2 * abs(num) + den) // (2 * den)
    return -q if num < 0 else q


def approximate(values, denx):
    return [round_half_away(v.numerator * denx, v.denominator) for v in values]


def test_guaranteed(curr_backend):
    """Test 2/3 and -3/4 from approximations over 120 with bound 12."""
    result = dyadic_to_rational_vector([80, -90], 120, 12, curr_backend)
    assert (result == ([8, -9], 12, Confidence.GUARANTEED))


def test_confidence_is_minimum(curr_backend):
    """Test 2/3 and -3/4 from approximations over 20: both coordinates are only plausible."""
    numx = [13, -15]
    expected = min(dyadic_to_rational(n, 20, 12, curr_backend).confidence for n in numx)
    result = dyadic_to_rational_vector(numx, 20, 12, curr_backend)
    assert (result == ([8, -9], 12, expected))
    assert (expected == Confidence.PLAUSIBLE)


def test_bound_exceeded(curr_backend):
    """Test that a common denominator lcm(3, 4) above the bound fails the whole vector."""
    result = dyadic_to_rational_vector([80, -90], 120, 6, curr_backend)
    assert (result == ([], 0, Confidence.FAILED))
    assert not result


def test_scalar_failure(curr_backend, monkeypatch):
    """Test that a failing coordinate fails the whole vector."""
    from ratrecon import vector

    def fail(Z, n, d, den_bound):
        return ReconstructionResult(Z.zero, Z.zero, Confidence.FAILED)

    monkeypatch.setattr(vector, 'reconstruct_in_ring', fail)
    result = dyadic_to_rational_vector([64, 80], 128, 12, curr_backend)
    assert (result.confidence == Confidence.FAILED)
    assert (result.num == [])


def test_integers_keep_denominator_one(curr_backend):
    """Test that no reconstruction is needed while the approximations are integral."""
    assert (dyadic_to_rational_vector([64, -128, 0], 64, 1, curr_backend) == ([1, -2, 0], 1, Confidence.GUARANTEED))


def test_empty(curr_backend):
    """Test the empty vector."""
    assert (dyadic_to_rational_vector([], 8, 4, curr_backend) == ([], 1, Confidence.GUARANTEED))


def test_numpy_input(curr_backend):
    """Test numpy integer arrays as input."""
    result = dyadic_to_rational_vector(np.array([80, -90], dtype=np.int64), 120, 12, curr_backend)
    assert (result == ([8, -9], 12, Confidence.GUARANTEED))


def test_rejects_matrix():
    """Test that only one-dimensional input is accepted."""
    with pytest.raises(ValueError):
        dyadic_to_rational_vector([[1, 2], [3, 4]], 8, 4)


@pytest.mark.parametrize("denx,bound", [(0, 4), (-8, 4), (8, 0)])
def test_invalid_arguments(denx, bound):
    """Test that non-positive denominators and bounds are rejected."""
    with pytest.raises(ValueError):
        dyadic_to_rational_vector([1, 2], denx, bound)


def test_balanced_rounding(Z):
    """Test the tie rule: a remainder of exactly half rounds the quotient up."""
    m, half = Z.init(20), Z.init(10)
    assert (balanced_quo_rem(Z, Z.init(10), m, half) == (1, -10))
    assert (balanced_quo_rem(Z, Z.init(9), m, half) == (0, 9))
    assert (balanced_quo_rem(Z, Z.init(30), m, half) == (2, -10))
    assert (balanced_quo_rem(Z, Z.init(29), m, half) == (1, 9))
    # odd modulus: half = 10 already counts as the upper half
    assert (balanced_quo_rem(Z, Z.init(10), Z.init(21), half) == (1, -11))
    assert (balanced_quo_rem(Z, Z.init(9), Z.init(21), half) == (0, 9))


def test_apply_deferred(Z):
    """Test that deferred multipliers rescale exactly the stale numerators."""
    state = VectorReconstructionState(Z)
    state.num = [Z.one] * 4
    state.grow(1, Z.init(2))
    state.grow(3, Z.init(6))
    assert ([m for _, m in state.deferred] == [1, 2, 3])
    state.apply_deferred()
    assert (state.num == [6, 3, 3, 1])
    assert (state.den == 6)
    assert (len(state.deferred) == 1)


def test_several_growth_events(curr_backend):
    """Test a vector whose common denominator grows four times."""
    values = [Fraction(1, 2), Fraction(1, 3), Fraction(1, 5), Fraction(1, 7), Fraction(3, 2), Fraction(-4, 3), Fraction(0),
              Fraction(6, 35)]
    denx = 2**30
    result = dyadic_to_rational_vector(approximate(values, denx), denx, 210, curr_backend)
    assert (result.den == 210)
    assert (result.confidence == Confidence.GUARANTEED)
    assert (result.to_fractions() == values)


def test_random_vectors(curr_backend):
    """Test residual bound, denominator bound and agreement with the independent variant."""
    rng = random.Random(2024)
    denominators = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 12, 15]
    bound = 10**6
    denx = 2**64
    for _ in range(20):
        values = [Fraction(rng.randint(-10**6, 10**6), rng.choice(denominators)) for _ in range(rng.randint(1, 12))]
        numx = approximate(values, denx)
        num, den, confidence = result = dyadic_to_rational_vector(numx, denx, bound, curr_backend)
        assert (confidence == Confidence.GUARANTEED)
        assert (den <= bound)
        assert (den == lcm(*[v.denominator for v in values]))
        for n, x in zip(num, numx):
            assert (2 * abs(x * den - n * denx) <= den)
        assert (result.to_fractions() == values)
        assert (reconstruct_vector_independent(numx, denx, bound, curr_backend) == result)


def test_independent_variant(curr_backend):
    """Test the two-pass variant on its own, including failure."""
    assert (reconstruct_vector_independent([80, -90], 120, 12, curr_backend) == ([8, -9], 12, Confidence.GUARANTEED))
    assert (reconstruct_vector_independent([80, -90], 120, 6, curr_backend) == ([], 0, Confidence.FAILED))
    assert (reconstruct_vector_independent([], 120, 6, curr_backend) == ([], 1, Confidence.GUARANTEED))


def sweep(k, dx, bound, backend):
    """Reconstruct i/k for i from -k-2 to k+1 from approximations over dx, one by one and as vector.

    Returns the lowest confidence seen.
    """
    kp = k + 2
    values = [i - kp for i in range(2 * kp)]
    nx = [(2 * v * dx + k) // (2 * k) for v in values]  # floor(v*dx/k + 1/2)
    ret = Confidence.GUARANTEED
    for v, n in zip(values, nx):
        a, b, confidence = dyadic_to_rational(n, dx, bound, backend)
        assert (confidence > Confidence.FAILED)
        assert (a * k == v * b)
        if confidence == Confidence.GUARANTEED:
            assert (b * bound < dx)
        ret = min(ret, confidence)
    num, den, confidence = dyadic_to_rational_vector(nx, dx, bound, backend)
    assert (confidence > Confidence.FAILED)
    assert (den == k)
    assert (num == values)
    return min(ret, confidence)


@pytest.mark.parametrize("k", [2, 3, 7, 10, 16])
def test_sweeps(curr_backend, k):
    """Test i/k sweeps: mixed, all plausible, all guaranteed."""
    assert (sweep(k, k * k, k, curr_backend) == Confidence.PLAUSIBLE)
    assert (sweep(k, k * k, k * k, curr_backend) == Confidence.PLAUSIBLE)
    assert (sweep(k, k * k + 2 * k, k + 1, curr_backend) == Confidence.GUARANTEED)


def test_dyadic_2_64(curr_backend):
    """Test ten coordinates approximated over 2^64 with denominator bound 2^32."""
    B = 10**9
    B2 = B * B
    nx = [
        -143 * B2 - 298423624 * B - 962150784,
        239 * B2 + 120348615 * B + 509085366,
        -4 * B2 - 959983787 * B - 562075119,
        27 * B2 + 8864641 * B + 551149627,
        62 * B2 + 971469325 * B + 838237476,
        190 * B2 + 559070838 * B + 297135961,
        176 * B2 + 172593329 * B + 811309753,
        -70 * B2 - 861003759 * B - 845628342,
        -228 * B2 - 416339507 * B - 338896853,
        -14 * B2 - 398832745 * B - 762391791,
    ]
    num_true = [
        -5 * B - 372642434,
        8 * B + 965263534,
        -185963102,
        1 * B + 12634812,
        2 * B + 360969365,
        7 * B + 144570919,
        6 * B + 605183272,
        -2 * B - 656769182,
        -8 * B - 563941509,
        -539850878,
    ]
    num, den, confidence = dyadic_to_rational_vector(nx, 2**64, 2**32, curr_backend)
    assert (confidence > Confidence.FAILED)
    assert (den == 691617936)
    assert (num == num_true)


@pytest.mark.parametrize("level", [logging.DEBUG, logging.WARNING])
def test_thousands_of_digits(curr_backend, caplog, level):
    """Test a common denominator of more than 8800 decimal digits, with and without debug logging."""
    q1, q2 = 10**4400 + 1, 10**4400 + 3
    values = [Fraction(1, q1), Fraction(-1, q2), Fraction(3, q1), Fraction(7)]
    denx = 2**80000
    numx = approximate(values, denx)
    with caplog.at_level(level, logger='ratrecon'):
        result = dyadic_to_rational_vector(numx, denx, 10**8801, curr_backend)
        assert (result.confidence == Confidence.GUARANTEED)
        assert (result.den == q1 * q2)
        assert (result.num == [q2, -q1, 3 * q2, 7 * q1 * q2])
        assert (reconstruct_vector_independent(numx, denx, 10**8801, curr_backend) == result)
        # lcm(q1, q2) is above this bound
        assert (dyadic_to_rational_vector(numx, denx, 10**8799, curr_backend) == ([], 0, Confidence.FAILED))
        assert (reconstruct_vector_independent(numx, denx, 10**8799, curr_backend) == ([], 0, Confidence.FAILED))
    if level == logging.DEBUG:
        assert ('grows from 1 to 14617-bit integer' in caplog.text)
        assert ('exceeds bound' in caplog.text)
    else:
        assert (caplog.records == [])
