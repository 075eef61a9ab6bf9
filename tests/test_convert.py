import random
from fractions import Fraction

import pytest

from bignum import nat
from bignum.convert import DecimalDigits, bounded_decimal, pow5_bounds, shr_ceil


rng = random.Random(2718)


@pytest.mark.parametrize('value, shift, expected', [
    (0, 3, 0), (8, 3, 1), (9, 3, 2), (15, 3, 2), (1 << 100, 64, 1 << 36),
    ((1 << 100) + 1, 64, (1 << 36) + 1),
])
def test_shr_ceil(value, shift, expected):
    assert nat.to_int(shr_ceil(nat.from_int(value), shift)) == expected


@pytest.mark.parametrize('k', [0, 1, 2, 27, 28, 100, 1000, 54321])
@pytest.mark.parametrize('prec', [64, 200])
def test_pow5_bounds(k, prec):
    lo, hi, e = pow5_bounds(k, prec)
    lo, hi = nat.to_int(lo), nat.to_int(hi)
    assert hi.bit_length() <= prec + 1
    assert e >= 0
    power = Fraction(5 ** k, 2 ** e)
    assert lo <= power <= hi
    # Narrow enough to be useful
    assert (hi - lo) * 2 ** 32 < lo
    if (5 ** k).bit_length() <= prec:
        assert lo == hi == 5 ** k and e == 0


def decimal_digits(value, s):
    '''The decimal digits of the positive Fraction value rounded half to even at 10**s.'''
    q, r = divmod(value / Fraction(10) ** s, 1)
    if 2 * r > 1 or 2 * r == 1 and q & 1:
        q += 1
    q = int(q)
    if not q:
        return DecimalDigits()
    text = str(q)
    return DecimalDigits(text.rstrip('0'), len(text) + s)


def test_bounded_decimal():
    for _ in range(50):
        m = rng.getrandbits(rng.randrange(1, 200)) | 1
        e = rng.randrange(-1000, 1000)
        s = rng.randrange(-320, 320)
        value = Fraction(m) * Fraction(2) ** e
        d = bounded_decimal(nat.from_int(m), e, s)
        if d is not None:
            assert d == decimal_digits(value, s)


def test_bounded_decimal_significant_digits():
    # 2**100 == 1267650600228229401496703205376; s is corrected to 26 from either side
    d = bounded_decimal(nat.from_int(1), 100, 25, 5)
    assert d == DecimalDigits('12677', 31)
    d = bounded_decimal(nat.from_int(1), 100, 29, 5)
    assert d == DecimalDigits('12677', 31)


@pytest.mark.parametrize('m, e, s', [
    # 0.125 to two places, and 2.5 to a whole number
    (1, -3, -2), (5, -1, 0),
])
def test_bounded_decimal_tie(m, e, s):
    assert bounded_decimal(nat.from_int(m), e, s) is None


def test_bounded_decimal_zero():
    assert bounded_decimal(nat.from_int(1), -20, 0) == DecimalDigits()
    assert bounded_decimal(nat.from_int(3), -2, 0) == DecimalDigits('1', 1)
