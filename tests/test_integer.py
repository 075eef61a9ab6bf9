import math
import os
import random

import pytest

from bignum import *


boolean_codes = {
    'Y': True,
    'N': False,
}

rng = random.Random(31415)


def read_lines(filename):
    result = []
    with open(os.path.join(os.path.dirname(__file__), 'data', filename)) as f:
        for line in f:
            hash_pos = line.find('#')
            if hash_pos != -1:
                line = line[:hash_pos]
            line = line.strip()
            if line:
                result.append(line)
    return result


def signed_values(count, max_bits):
    result = [0, 1, -1, 2, -2, (1 << 32) - 1, -(1 << 32), 1 << 64]
    for _ in range(count):
        value = rng.getrandbits(rng.randrange(1, max_bits))
        result.append(-value if rng.random() < 0.5 else value)
    return result


values = signed_values(12, 200)
pairs = [(x, y) for x in values[::2] for y in values[1::2]]


class TestConstruction:

    @pytest.mark.parametrize('value', values)
    def test_int_round_trip(self, value):
        assert int(Int(value)) == value
        assert Int(Int(value)) == value

    def test_zero_not_negative(self):
        assert Int(-0).sign() == 0
        assert Int(5).sub(5).neg().sign() == 0
        assert str(Int(3).mul(Int(0)).neg()) == '0'

    def test_string(self):
        assert Int('-123') == -123
        assert Int('ff', 16) == 255

    def test_bad_types(self):
        with pytest.raises(TypeError):
            Int(1.5)
        with pytest.raises(TypeError):
            Int(5, 10)


class TestArithmetic:

    @pytest.mark.parametrize('x, y', pairs)
    def test_add_sub_mul(self, x, y):
        X, Y = Int(x), Int(y)
        assert X.add(Y) == x + y
        assert X.sub(Y) == x - y
        assert X.mul(Y) == x * y
        assert X + y == x + y
        assert x - Y == x - y
        assert X * Y == x * y

    @pytest.mark.parametrize('x, y', [(x, y) for x, y in pairs if y])
    def test_truncated_division(self, x, y):
        q, r = Int(x).quo_rem(Int(y))
        assert q * y + r == x
        assert abs(int(r)) < abs(y)
        assert r.sign() in (0, -1 if x < 0 else 1)

    @pytest.mark.parametrize('x, y', [(x, y) for x, y in pairs if y])
    def test_euclidean_division(self, x, y):
        q, m = Int(x).div_mod(Int(y))
        assert q * y + m == x
        assert 0 <= m < abs(y)
        assert Int(x).div(y) == q
        assert Int(x).mod(y) == m

    @pytest.mark.parametrize('x, y', [(x, y) for x, y in pairs if y])
    def test_floor_division_operators(self, x, y):
        X = Int(x)
        assert X // y == x // y
        assert X % y == x % y
        assert divmod(X, Int(y)) == divmod(x, y)

    @pytest.mark.parametrize('x, y, q, r, d, m', [
        (7, 2, 3, 1, 3, 1),
        (-7, 2, -3, -1, -4, 1),
        (7, -2, -3, 1, -3, 1),
        (-7, -2, 3, -1, 4, 1),
    ])
    def test_division_flavours(self, x, y, q, r, d, m):
        assert Int(x).quo_rem(y) == (q, r)
        assert Int(x).div_mod(y) == (d, m)

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            Int(5).quo(0)
        with pytest.raises(ZeroDivisionError):
            Int(5) // 0

    def test_aliasing(self):
        x = Int(12345678901234567890)
        assert x.add(x) == 2 * 12345678901234567890
        assert x.mul(x) == 12345678901234567890 ** 2
        assert x.quo(x) == 1
        assert x == 12345678901234567890

    def test_shift_scenario(self):
        x = Int(1).lsh(128)
        assert x.rsh(64) == 1 << 64
        assert str(x) == '340282366920938463463374607431768211456'

    @pytest.mark.parametrize('x, y, m', [
        (2, 100, None), (-3, 5, None), (-3, 4, None), (0, 0, None),
        (4, 13, 497), (-4, 13, 497), (-4, 13, -497), (5, 0, 1), (5, 0, 7), (3, -2, 5),
        (12345, 67890, 1 << 89),
    ])
    def test_exp(self, x, y, m):
        result = Int(x).exp(y, m)
        if y <= 0:
            expected = 0 if m is not None and abs(m) == 1 else 1
        elif m is None:
            expected = x ** y
        else:
            expected = pow(x, y, abs(m))
        assert result == expected

    @pytest.mark.parametrize('x, y, m', [(3, 200, None), (-3, 7, 11), (2, -1, 7),
                                         (3, 5, -7)])
    def test_pow_operator(self, x, y, m):
        if m is None:
            assert Int(x) ** y == x ** y
        else:
            assert pow(Int(x), y, m) == pow(x, y, m)

    def test_pow_not_invertible(self):
        with pytest.raises(ValueError):
            pow(Int(2), -1, 4)


class TestBits:

    @pytest.mark.parametrize('x, y', pairs)
    def test_logic(self, x, y):
        X, Y = Int(x), Int(y)
        assert X.and_(Y) == x & y
        assert X.or_(Y) == x | y
        assert X.xor(Y) == x ^ y
        assert X.and_not(Y) == x & ~y
        assert X & y == x & y
        assert y | X == y | x

    @pytest.mark.parametrize('x', values)
    def test_not(self, x):
        assert Int(x).not_() == ~x
        assert ~Int(x) == ~x

    @pytest.mark.parametrize('x', values)
    @pytest.mark.parametrize('n', [0, 1, 31, 32, 65])
    def test_shifts(self, x, n):
        assert Int(x).lsh(n) == x << n
        assert Int(x).rsh(n) == x >> n
        assert Int(x) >> n == x >> n

    @pytest.mark.parametrize('x', values)
    @pytest.mark.parametrize('i', [0, 5, 40, 300])
    def test_bit(self, x, i):
        assert Int(x).bit(i) == (x >> i) & 1
        assert Int(x).set_bit(i, 1) == x | (1 << i)
        assert Int(x).set_bit(i, 0) == x & ~(1 << i)

    def test_set_bit_value(self):
        with pytest.raises(PreconditionError):
            Int(1).set_bit(0, 2)

    def test_negative_shift(self):
        with pytest.raises(PreconditionError):
            Int(1).lsh(-1)

    def test_bit_len(self):
        assert Int(-255).bit_len() == 8
        assert Int(0).bit_len() == 0
        assert Int(40).trailing_zero_bits() == 3


class TestNumberTheory:

    @pytest.mark.parametrize('a, b', [(240, 46), (17, 5), (1 << 100, 3 ** 50), (12, 12),
                                      (2 ** 64 * 3, 2 ** 70 * 5)])
    def test_gcdext(self, a, b):
        g, x, y = gcdext(a, b)
        assert g == gcd(a, b)
        assert Int(a).mul(x).add(Int(b).mul(y)) == g
        assert g == math.gcd(a, b)

    @pytest.mark.parametrize('a, b', [(0, 5), (5, 0), (-3, 6), (4, -2)])
    def test_gcd_non_positive(self, a, b):
        assert gcd(a, b) == 0
        assert gcdext(a, b) == (0, 0, 0)

    @pytest.mark.parametrize('g, n', [(3, 11), (10, 17), (-3, 11), (7, 1 << 61), (3, -11)])
    def test_mod_inverse(self, g, n):
        inv = mod_inverse(g, n)
        assert 0 <= inv < abs(n)
        assert (inv * g) % abs(n) == 1

    def test_mod_inverse_none(self):
        assert mod_inverse(6, 9) is None
        with pytest.raises(DivisionByZero):
            mod_inverse(3, 0)

    @pytest.mark.parametrize('x, p', [(4, 7), (2, 7), (10, 13), (5, 41), (3, 73), (0, 13),
                                      (2, 1000000007), (13, 17)])
    def test_mod_sqrt(self, x, p):
        root = mod_sqrt(x, p)
        if pow(x, (p - 1) // 2, p) not in (0, 1):
            assert root is None
        else:
            assert root is not None
            assert (root * root) % p == x % p

    def test_mod_sqrt_scenario(self):
        assert mod_sqrt(4, 7) in (2, 5)
        assert mod_sqrt(3, 7) is None

    def test_mod_sqrt_even(self):
        with pytest.raises(PreconditionError):
            mod_sqrt(4, 8)

    @pytest.mark.parametrize('x, y, expected', [
        (1, 1, 1), (2, 3, -1), (2, 7, 1), (5, 9, 1), (3, 9, 0), (-1, 3, -1), (-1, 5, 1),
        (1001, 9907, -1), (19, 45, 1), (8, 21, -1), (5, 21, 1),
    ])
    def test_jacobi(self, x, y, expected):
        assert jacobi(x, y) == expected

    def test_jacobi_even(self):
        with pytest.raises(PreconditionError):
            jacobi(3, 10)

    @pytest.mark.parametrize('a, b, expected', [
        (1, 5, 120), (5, 1, 1), (-3, 3, 0), (-3, -1, -6), (-4, -1, 24), (10, 10, 10),
    ])
    def test_mul_range(self, a, b, expected):
        assert mul_range(a, b) == expected

    @pytest.mark.parametrize('n, k, expected', [(5, 2, 10), (10, 0, 1), (3, 5, 0),
                                                (100, 50, 100891344545564193334812497256)])
    def test_binomial(self, n, k, expected):
        assert binomial(n, k) == expected


class TestPrimality:

    @pytest.mark.parametrize('line', read_lines('primes.txt'))
    def test_prime_table(self, line):
        text, code = line.split()
        value = Int(text)
        assert value.probably_prime(20) is boolean_codes[code]

    @pytest.mark.parametrize('line', read_lines('primes.txt'))
    def test_never_false_for_primes_with_zero_rounds(self, line):
        text, code = line.split()
        if boolean_codes[code]:
            assert Int(text).probably_prime(0)

    def test_product_of_primes(self):
        assert not (Int(1000000007) * 998244353).probably_prime()
        assert not (Int(2305843009213693951) * 2305843009213693951).probably_prime()

    def test_negative(self):
        assert not Int(-7).probably_prime()

    def test_negative_rounds(self):
        with pytest.raises(PreconditionError):
            Int(7).probably_prime(-1)


class TestText:

    @pytest.mark.parametrize('base', range(2, 37))
    @pytest.mark.parametrize('x', [0, 1, -1, 35, -(3 ** 77), 1 << 100])
    def test_round_trip(self, base, x):
        text = Int(x).text(base)
        assert Int.parse(text, base) == x
        assert int(text, base) == x

    @pytest.mark.parametrize('text, value', [
        ('0x1f', 31), ('-0X1F', -31), ('0b1010', 10), ('0o17', 15), ('017', 15),
        ('0', 0), ('+42', 42), ('-0', 0),
    ])
    def test_parse_base0(self, text, value):
        assert Int.parse(text) == value

    @pytest.mark.parametrize('text', ['', '-', '12a', '0x', '0b2', ' 1', '1.5', '08'])
    def test_parse_errors(self, text):
        with pytest.raises(ParseError):
            Int.parse(text)

    def test_parse_error_offset(self):
        with pytest.raises(ParseError) as e:
            Int.parse('123x5')
        assert e.value.offset == 3
        assert not isinstance(e.value, ArithmeticError)

    def test_bad_base(self):
        with pytest.raises(PreconditionError):
            Int.parse('1', 37)

    @pytest.mark.parametrize('spec, value', [
        ('', 255), ('d', -255), ('x', 255), ('#x', 255), ('#X', 255), ('#b', 5), ('o', 8),
        ('+d', 7), ('>10', -42), ('<8x', 255), ('^9', 123), ('08d', -42), ('#010x', 255),
    ])
    def test_format(self, spec, value):
        assert format(Int(value), spec) == format(value, spec)

    def test_repr(self):
        assert repr(Int(-5)) == 'Int(-5)'


class TestConversions:

    @pytest.mark.parametrize('value', [0, 1, 255, 1 << 64, 3 ** 90])
    def test_bytes(self, value):
        assert Int(value).bytes() == value.to_bytes((value.bit_length() + 7) // 8, 'big')
        assert Int.from_bytes(Int(value).bytes()) == value

    def test_bytes_drop_sign(self):
        assert Int(-258).bytes() == b'\x01\x02'

    def test_random(self):
        r = random.Random(7)
        for _ in range(20):
            assert 0 <= Int.random(1000, r) < 1000
        with pytest.raises(PreconditionError):
            Int.random(0)

    @pytest.mark.parametrize('value', [0, 1, -1, (1 << 53) + 1, -(3 ** 50), 1 << 1023])
    def test_float64(self, value):
        f, acc = Int(value).float64()
        assert f == float(value)
        expected = (f > value) - (f < value)
        assert acc == expected

    def test_float_overflow(self):
        f, acc = Int(1 << 1024).float64()
        assert f == float('inf') and acc == ABOVE
        with pytest.raises(OverflowError):
            float(Int(1 << 1024))

    def test_hash(self):
        assert hash(Int(-(1 << 100))) == hash(-(1 << 100))
        assert {Int(3): 'x'}[3] == 'x'

    def test_index(self):
        assert [0, 1, 2, 3][Int(2)] == 2
        assert bool(Int(0)) is False
