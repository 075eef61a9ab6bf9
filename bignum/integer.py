#
# Unbounded signed integers
#
# (c) The bignum authors 2026.  All rights reserved.
#

import logging
import random

from . import nat
from .context import Accuracy
from .convert import FormatSpec, quotient_to_native, scan_sign
from .errors import DivisionByZero, ParseError, PreconditionError


__all__ = ('Int', 'gcd', 'gcdext', 'mod_inverse', 'mod_sqrt', 'jacobi',
           'mul_range', 'binomial')

logger = logging.getLogger(__name__)

# Format type -> (base, alternate-form prefix)
INT_FORMATS = {
    'b': (2, '0b'),
    'o': (8, '0o'),
    'd': (10, ''),
    'x': (16, '0x'),
    'X': (16, '0X'),
}


class Int:
    '''An unbounded signed integer: a sign and a digit-vector magnitude.

    Int values are immutable.  Every operation returns a new value and operands may be
    freely shared.  Zero is never negative.

    Division comes in two flavours.  quo, rem and quo_rem truncate towards zero so the
    remainder takes the sign of the dividend.  div, mod and div_mod are Euclidean: the
    remainder is always non-negative.  The Python operators //, % and divmod() floor, as
    they do for int.
    '''

    __slots__ = ('_neg', '_abs')

    def __init__(self, value=0, base=0):
        '''value is an int, an Int or a string.  Strings are parsed in the given base; see
        parse().'''
        if isinstance(value, str):
            value = Int.parse(value, base)
        elif base:
            raise TypeError('base given for a non-string value')
        if isinstance(value, Int):
            self._neg, self._abs = value._neg, value._abs
        elif isinstance(value, int):
            self._neg = value < 0
            self._abs = nat.from_int(-value if value < 0 else value)
        else:
            raise TypeError(f'cannot convert {type(value).__name__} to Int')

    @classmethod
    def _make(cls, neg, mag):
        z = object.__new__(cls)
        z._neg = neg and bool(mag)
        z._abs = mag
        return z

    @classmethod
    def _from(cls, value):
        '''Coerce an operand.'''
        if isinstance(value, Int):
            return value
        if isinstance(value, int):
            return cls(value)
        raise TypeError(f'expected an Int or int, not {type(value).__name__}')

    ##
    ## Queries
    ##

    def sign(self):
        '''Return -1, 0 or 1.'''
        if not self._abs:
            return 0
        return -1 if self._neg else 1

    def cmp(self, y):
        y = Int._from(y)
        if self._neg != y._neg:
            return -1 if self._neg else 1
        r = nat.cmp(self._abs, y._abs)
        return -r if self._neg else r

    def cmp_abs(self, y):
        return nat.cmp(self._abs, Int._from(y)._abs)

    def is_zero(self):
        return not self._abs

    def bit_len(self):
        '''The bit length of the absolute value.'''
        return nat.bit_len(self._abs)

    def trailing_zero_bits(self):
        '''The number of consecutive least significant zero bits of the absolute value.'''
        return nat.trailing_zero_bits(self._abs)

    ##
    ## Arithmetic
    ##

    def neg(self):
        return Int._make(not self._neg, self._abs)

    def abs(self):
        return Int._make(False, self._abs)

    def add(self, y):
        y = Int._from(y)
        if self._neg == y._neg:
            # x + y == x + y
            # (-x) + (-y) == -(x + y)
            return Int._make(self._neg, nat.add(self._abs, y._abs))
        # x + (-y) == x - y == -(y - x)
        # (-x) + y == y - x == -(x - y)
        if nat.cmp(self._abs, y._abs) >= 0:
            return Int._make(self._neg, nat.sub(self._abs, y._abs))
        return Int._make(not self._neg, nat.sub(y._abs, self._abs))

    def sub(self, y):
        return self.add(Int._from(y).neg())

    def mul(self, y):
        y = Int._from(y)
        return Int._make(self._neg != y._neg, nat.mul(self._abs, y._abs))

    def quo_rem(self, y):
        '''Truncated division: return (q, r) with self = q * y + r and |r| < |y|, r having
        the sign of self.'''
        y = Int._from(y)
        q, r = nat.divide(self._abs, y._abs)
        return Int._make(self._neg != y._neg, q), Int._make(self._neg, r)

    def quo(self, y):
        return self.quo_rem(y)[0]

    def rem(self, y):
        return self.quo_rem(y)[1]

    def div_mod(self, y):
        '''Euclidean division: return (q, m) with self = q * y + m and 0 <= m < |y|.'''
        y = Int._from(y)
        q, m = self.quo_rem(y)
        if m._neg:
            if y._neg:
                q, m = q.add(ONE), m.sub(y)
            else:
                q, m = q.sub(ONE), m.add(y)
        return q, m

    def div(self, y):
        return self.div_mod(y)[0]

    def mod(self, y):
        return self.div_mod(y)[1]

    def _floor_div_mod(self, y):
        q, r = self.quo_rem(y)
        if r._abs and r._neg != y._neg:
            q, r = q.sub(ONE), r.add(y)
        return q, r

    def exp(self, y, m=None):
        '''Return self**y mod |m|.

        If y <= 0 the result is 1 mod |m|.  If m is None or zero no reduction takes place.
        With a modulus the result lies in [0, |m|).
        '''
        y = Int._from(y)
        m_abs = Int._from(m)._abs if m is not None else []
        if y._neg or not y._abs:
            if len(m_abs) == 1 and m_abs[0] == 1:
                return ZERO
            return ONE

        neg = self._neg and bool(y._abs[0] & 1)
        z = nat.exp(self._abs, y._abs, m_abs)
        if neg and m_abs and z:
            # -x mod m == m - x
            return Int._make(False, nat.sub(m_abs, z))
        return Int._make(neg, z)

    def probably_prime(self, reps=20):
        '''Return True if self is probably prime.

        Applies a Miller-Rabin test with reps pseudo-randomly chosen bases plus a base of
        2.  The probability that a composite passes is at most 4**-reps for random input.
        A prime always passes.  Not suitable for judging inputs crafted by an adversary.
        '''
        if reps < 0:
            raise PreconditionError(f'negative number of Miller-Rabin rounds: {reps}')
        if self._neg:
            return False
        result = nat.probably_prime(self._abs, reps)
        logger.debug('probably_prime of %d-bit value with %d rounds: %s',
                     self.bit_len(), reps, result)
        return result

    ##
    ## Bit operations.  Negative values behave as infinite two's complement.
    ##

    def bit(self, i):
        '''Return the value of bit i.'''
        if self._neg:
            # -x has the bits of ~(x - 1)
            return nat.bit(nat.sub(self._abs, [1]), i) ^ 1
        return nat.bit(self._abs, i)

    def set_bit(self, i, b):
        '''Return self with bit i set to b, which must be 0 or 1.'''
        if b not in (0, 1):
            raise PreconditionError(f'set_bit value must be 0 or 1, not {b!r}')
        if self._neg:
            t = nat.set_bit(nat.sub(self._abs, [1]), i, b ^ 1)
            return Int._make(True, nat.add_word(t, 1))
        return Int._make(False, nat.set_bit(self._abs, i, b))

    def lsh(self, n):
        if n < 0:
            raise PreconditionError('negative shift count')
        return Int._make(self._neg, nat.shl(self._abs, n))

    def rsh(self, n):
        '''Arithmetic shift right; rounds towards negative infinity.'''
        if n < 0:
            raise PreconditionError('negative shift count')
        if self._neg:
            # (-x) >> s == ^(x-1) >> s == ^((x-1) >> s) == -(((x-1) >> s) + 1)
            t = nat.shr(nat.sub(self._abs, [1]), n)
            return Int._make(True, nat.add_word(t, 1))
        return Int._make(False, nat.shr(self._abs, n))

    def and_(self, y):
        x, y = self, Int._from(y)
        if x._neg == y._neg:
            if x._neg:
                # (-x) & (-y) == ^(x-1) & ^(y-1) == ^((x-1) | (y-1)) == -(((x-1) | (y-1)) + 1)
                x1 = nat.sub(x._abs, [1])
                y1 = nat.sub(y._abs, [1])
                return Int._make(True, nat.add_word(nat.or_(x1, y1), 1))
            return Int._make(False, nat.and_(x._abs, y._abs))
        if x._neg:
            x, y = y, x
        # x & (-y) == x & ^(y-1) == x &^ (y-1)
        return Int._make(False, nat.and_not(x._abs, nat.sub(y._abs, [1])))

    def and_not(self, y):
        '''Return self & ~y.'''
        x, y = self, Int._from(y)
        if x._neg == y._neg:
            if x._neg:
                # (-x) &^ (-y) == ^(x-1) &^ ^(y-1) == ^(x-1) & (y-1) == (y-1) &^ (x-1)
                x1 = nat.sub(x._abs, [1])
                y1 = nat.sub(y._abs, [1])
                return Int._make(False, nat.and_not(y1, x1))
            return Int._make(False, nat.and_not(x._abs, y._abs))
        if x._neg:
            # (-x) &^ y == ^(x-1) &^ y == ^(x-1) & ^y == ^((x-1) | y) == -(((x-1) | y) + 1)
            x1 = nat.sub(x._abs, [1])
            return Int._make(True, nat.add_word(nat.or_(x1, y._abs), 1))
        # x &^ (-y) == x &^ ^(y-1) == x & (y-1)
        return Int._make(False, nat.and_(x._abs, nat.sub(y._abs, [1])))

    def or_(self, y):
        x, y = self, Int._from(y)
        if x._neg == y._neg:
            if x._neg:
                # (-x) | (-y) == ^(x-1) | ^(y-1) == ^((x-1) & (y-1)) == -(((x-1) & (y-1)) + 1)
                x1 = nat.sub(x._abs, [1])
                y1 = nat.sub(y._abs, [1])
                return Int._make(True, nat.add_word(nat.and_(x1, y1), 1))
            return Int._make(False, nat.or_(x._abs, y._abs))
        if x._neg:
            x, y = y, x
        # x | (-y) == x | ^(y-1) == ^((y-1) &^ x) == -(^((y-1) &^ x) + 1)
        y1 = nat.sub(y._abs, [1])
        return Int._make(True, nat.add_word(nat.and_not(y1, x._abs), 1))

    def xor(self, y):
        x, y = self, Int._from(y)
        if x._neg == y._neg:
            if x._neg:
                # (-x) ^ (-y) == ^(x-1) ^ ^(y-1) == (x-1) ^ (y-1)
                x1 = nat.sub(x._abs, [1])
                y1 = nat.sub(y._abs, [1])
                return Int._make(False, nat.xor(x1, y1))
            return Int._make(False, nat.xor(x._abs, y._abs))
        if x._neg:
            x, y = y, x
        # x ^ (-y) == x ^ ^(y-1) == ^(x ^ (y-1)) == -((x ^ (y-1)) + 1)
        y1 = nat.sub(y._abs, [1])
        return Int._make(True, nat.add_word(nat.xor(x._abs, y1), 1))

    def not_(self):
        if self._neg:
            # ^(-x) == ^(^(x-1)) == x-1
            return Int._make(False, nat.sub(self._abs, [1]))
        # ^x == -x-1 == -(x+1)
        return Int._make(True, nat.add_word(self._abs, 1))

    ##
    ## Conversions
    ##

    def text(self, base=10):
        '''Return self in the given base, 2 to 36, with lowercase letters for digits above 9
        and no prefix.'''
        digits = nat.itoa(self._abs, base)
        return '-' + digits if self._neg else digits

    @classmethod
    def parse(cls, text, base=0):
        '''Parse text as an optionally signed integer in base, which must be 0 or 2 to 36.

        With base 0 a prefix selects the base: "0b" for 2, "0o" or "0" for 8, "0x" for
        16, and otherwise 10.  Raises ParseError if text is not entirely an integer.
        '''
        if base != 0 and not 2 <= base <= nat.MAX_BASE:
            raise PreconditionError(f'invalid base {base}')
        try:
            neg, pos = scan_sign(text, 0)
            mag, base, _, pos = nat.scan(text, pos, base, False)
            if pos != len(text):
                raise ParseError(text, pos, base, 'unexpected character')
        except ParseError as e:
            logger.debug('cannot parse %r as an Int: %s', text, e.reason)
            raise
        return cls._make(neg, mag)

    def bytes(self):
        '''The absolute value as big-endian bytes.'''
        return nat.to_bytes(self._abs)

    @classmethod
    def from_bytes(cls, buf):
        '''Interpret buf as a big-endian unsigned integer.'''
        return cls._make(False, nat.from_bytes(buf))

    @classmethod
    def random(cls, limit, rng=None):
        '''Return a uniformly distributed pseudo-random Int in [0, limit).'''
        limit = Int._from(limit)
        if limit.sign() <= 0:
            raise PreconditionError('random limit must be positive')
        return cls._make(False, nat.random_below(rng or random.Random(), limit._abs))

    def float64(self):
        '''Return (f, acc): the float nearest to self, ties to even, and its accuracy.'''
        f, direction = quotient_to_native(self._abs, [1], 53, 11)
        if self._neg:
            return -f, Accuracy(-direction)
        return f, Accuracy(direction)

    ##
    ## Python numeric protocol
    ##

    def __repr__(self):
        return f'Int({self.text()})'

    def __str__(self):
        return self.text()

    def __format__(self, spec):
        fs = FormatSpec.parse(spec)
        kind = fs.type or 'd'
        if kind not in INT_FORMATS:
            raise ValueError(f'unknown format code {kind!r} for Int')
        if fs.precision is not None:
            raise ValueError('precision not allowed in integer format specifier')
        base, prefix = INT_FORMATS[kind]
        digits = nat.itoa(self._abs, base)
        if kind == 'X':
            digits = digits.upper()
        return fs.pad(self._neg, prefix if fs.alternate else '', digits)

    def __int__(self):
        value = nat.to_int(self._abs)
        return -value if self._neg else value

    __index__ = __int__

    def __float__(self):
        f, _ = self.float64()
        if f in (float('inf'), float('-inf')):
            raise OverflowError('Int too large to convert to float')
        return f

    def __bool__(self):
        return bool(self._abs)

    def __hash__(self):
        return hash(int(self))

    def _compare(self, other):
        if isinstance(other, (Int, int)):
            return self.cmp(other)
        return None

    def __eq__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c == 0

    def __ne__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c != 0

    def __lt__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c < 0

    def __le__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c <= 0

    def __gt__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c > 0

    def __ge__(self, other):
        c = self._compare(other)
        return NotImplemented if c is None else c >= 0

    def __neg__(self):
        return self.neg()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __invert__(self):
        return self.not_()

    def __add__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.add(other)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.sub(other)

    def __rsub__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return Int(other).sub(self)

    def __mul__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.mul(other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __floordiv__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self._floor_div_mod(Int._from(other))[0]

    def __rfloordiv__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return Int(other)._floor_div_mod(self)[0]

    def __mod__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self._floor_div_mod(Int._from(other))[1]

    def __rmod__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return Int(other)._floor_div_mod(self)[1]

    def __divmod__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self._floor_div_mod(Int._from(other))

    def __rdivmod__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return Int(other)._floor_div_mod(self)

    def __pow__(self, other, modulo=None):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        other = Int._from(other)
        if modulo is None:
            if other._neg:
                raise PreconditionError('negative exponent without a modulus')
            return self.exp(other)
        modulo = Int._from(modulo)
        if not modulo:
            raise DivisionByZero('pow() modulus is zero')
        base = self
        if other._neg:
            base = mod_inverse(self, modulo)
            if base is None:
                raise ValueError('base is not invertible for the given modulus')
            other = other.neg()
        result = base.exp(other, modulo)
        # Python gives the result the sign of the modulus
        if modulo._neg and result:
            result = result.add(modulo)
        return result

    def __rpow__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return Int(other).__pow__(self)

    def __lshift__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.lsh(int(other))

    def __rshift__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.rsh(int(other))

    def __and__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.and_(other)

    __rand__ = __and__

    def __or__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.or_(other)

    __ror__ = __or__

    def __xor__(self, other):
        if not isinstance(other, (Int, int)):
            return NotImplemented
        return self.xor(other)

    __rxor__ = __xor__


ZERO = Int(0)
ONE = Int(1)
TWO = Int(2)


#
# Number theory
#

def gcd(a, b):
    '''Return the greatest common divisor of a and b, or zero unless both are positive.'''
    a, b = Int._from(a), Int._from(b)
    if a.sign() <= 0 or b.sign() <= 0:
        return ZERO
    return Int._make(False, nat.gcd(a._abs, b._abs))


def gcdext(a, b):
    '''Return (g, x, y) where g is the greatest common divisor of a and b, and x and y are
    Bezout coefficients: g == a*x + b*y.  Returns three zeros unless a and b are positive.
    '''
    a, b = Int._from(a), Int._from(b)
    if a.sign() <= 0 or b.sign() <= 0:
        return ZERO, ZERO, ZERO

    old_r, r = a, b
    old_x, x = ONE, ZERO
    old_y, y = ZERO, ONE
    while r:
        q, rem = old_r.quo_rem(r)
        old_r, r = r, rem
        old_x, x = x, old_x.sub(q.mul(x))
        old_y, y = y, old_y.sub(q.mul(y))
    return old_r, old_x, old_y


def mod_inverse(g, n):
    '''Return the inverse of g modulo |n| in [0, |n|), or None if gcd(g, n) != 1.'''
    g, n = Int._from(g), Int._from(n).abs()
    if not n:
        raise DivisionByZero('modulus is zero')
    g = g.mod(n)
    if not g:
        return ZERO if n == ONE else None
    d, x, _ = gcdext(g, n)
    if d != ONE:
        return None
    return x.mod(n)


def jacobi(x, y):
    '''Return the Jacobi symbol (x/y), -1, 0 or 1.  y must be odd.'''
    x, y = Int._from(x), Int._from(y)
    if not y or not y._abs[0] & 1:
        raise PreconditionError(f'invalid second argument to jacobi: need an odd integer, '
                                f'got {y}')
    a, b = x, y
    j = 1
    if b._neg:
        if a._neg:
            j = -1
        b = b.abs()

    while True:
        if b == ONE:
            return j
        if not a:
            return 0
        a = a.mod(b)
        if not a:
            return 0
        # handle factors of 2 in a
        s = a.trailing_zero_bits()
        if s & 1:
            b_mod_8 = b._abs[0] & 7
            if b_mod_8 in (3, 5):
                j = -j
        c = a.rsh(s)
        # swap numerator and denominator
        if b._abs[0] & 3 == 3 and c._abs[0] & 3 == 3:
            j = -j
        a, b = b, c


def mod_sqrt(x, p):
    '''Return a square root of x modulo p, or None if x is not a square modulo p.

    p must be an odd prime.  The result for other odd p is undefined; an even p raises
    PreconditionError.
    '''
    x, p = Int._from(x), Int._from(p)
    symbol = jacobi(x, p)
    if symbol == -1:
        return None
    if symbol == 0:
        return ZERO
    p = p.abs()
    if p == ONE:
        return ZERO
    x = x.mod(p)
    if p._abs[0] & 3 == 3:
        # x**((p+1)/4) is a root for p == 3 mod 4
        return x.exp(p.add(ONE).rsh(2), p)
    return _tonelli_shanks(x, p)


def _tonelli_shanks(x, p):
    '''Tonelli-Shanks, following section 6 of "Square roots from 1; 24, 51, 10 to Dan
    Shanks" by Ezra Brown.'''
    # p - 1 == s * 2**e with s odd
    s = p.sub(ONE)
    e = s.trailing_zero_bits()
    s = s.rsh(e)

    # find a non-square n
    n = TWO
    while jacobi(n, p) != -1:
        n = n.add(ONE)
        if n >= p:
            return None

    y = x.exp(s.add(ONE).rsh(1), p)
    b = x.exp(s, p)
    g = n.exp(s, p)
    r = e
    while True:
        # find the least m such that ord_p(b) == 2**m
        m = 0
        t = b
        while t != ONE:
            t = t.mul(t).mod(p)
            m += 1
            if m >= r:
                return None
        if m == 0:
            return y
        t = g.exp(ZERO.set_bit(r - m - 1, 1), p)
        g = t.mul(t).mod(p)
        y = y.mul(t).mod(p)
        b = b.mul(g).mod(p)
        r = m


def mul_range(a, b):
    '''Return the product of all integers in the range [a, b].  An empty range gives 1.'''
    if a > b:
        return ONE
    if a <= 0 <= b:
        return ZERO
    neg = False
    if a < 0:
        neg = (b - a) & 1 == 0
        a, b = -b, -a
    return Int._make(neg, nat.mul_range(a, b))


def binomial(n, k):
    '''Return the binomial coefficient of (n, k).'''
    if k > n:
        return ZERO
    # reduce the number of multiplications by reducing k
    k = min(k, n - k)
    return mul_range(n - k + 1, n).quo(mul_range(1, k))
