#
# Exact rationals
#
# (c) The bignum authors 2026.  All rights reserved.
#

import logging
from fractions import Fraction

from . import nat
from .convert import quotient_to_native, scan_exponent, scan_sign, split_float
from .errors import DivisionByZero, ParseError
from .integer import Int


__all__ = ('Rat', )

logger = logging.getLogger(__name__)

# Decimal and binary exponents beyond these are rejected when parsing
MAX_EXP5 = 10 ** 6
MAX_EXP2 = 10 ** 7


class Rat:
    '''An exact rational number: a numerator Int and a positive denominator Int with no
    common factor.  Every operation returns a new, reduced value.'''

    __slots__ = ('_num', '_den')

    def __init__(self, numerator=0, denominator=1):
        '''numerator and denominator are ints or Ints; a zero denominator raises
        DivisionByZero.  A single string argument is parsed; see parse().'''
        if isinstance(numerator, str):
            if denominator != 1:
                raise TypeError('denominator given with a string')
            value = Rat.parse(numerator)
            self._num, self._den = value._num, value._den
        elif isinstance(numerator, Rat) and denominator == 1:
            self._num, self._den = numerator._num, numerator._den
        else:
            self._num, self._den = _reduce(numerator, denominator)

    @classmethod
    def _make(cls, num, den):
        '''Build from an already reduced pair.'''
        z = object.__new__(cls)
        z._num = num
        z._den = den
        return z

    @classmethod
    def _from(cls, value):
        if isinstance(value, Rat):
            return value
        if isinstance(value, (Int, int)):
            return cls._make(Int(value), ONE)
        if isinstance(value, Fraction):
            return cls(value.numerator, value.denominator)
        raise TypeError(f'expected a Rat, Int or int, not {type(value).__name__}')

    @property
    def numerator(self):
        return self._num

    @property
    def denominator(self):
        return self._den

    def sign(self):
        return self._num.sign()

    def is_int(self):
        return self._den == ONE

    ##
    ## Arithmetic
    ##

    def neg(self):
        return Rat._make(self._num.neg(), self._den)

    def abs(self):
        return Rat._make(self._num.abs(), self._den)

    def inv(self):
        '''Return 1 / self.'''
        if not self._num:
            raise DivisionByZero('division by zero')
        num, den = self._den, self._num
        if den.sign() < 0:
            num, den = num.neg(), den.neg()
        return Rat._make(num, den)

    def add(self, y):
        y = Rat._from(y)
        num = self._num.mul(y._den).add(y._num.mul(self._den))
        return Rat(num, self._den.mul(y._den))

    def sub(self, y):
        y = Rat._from(y)
        num = self._num.mul(y._den).sub(y._num.mul(self._den))
        return Rat(num, self._den.mul(y._den))

    def mul(self, y):
        y = Rat._from(y)
        return Rat(self._num.mul(y._num), self._den.mul(y._den))

    def quo(self, y):
        '''Return self / y.  Raises DivisionByZero if y is zero.'''
        y = Rat._from(y)
        if not y._num:
            raise DivisionByZero('division by zero')
        return Rat(self._num.mul(y._den), self._den.mul(y._num))

    def cmp(self, y):
        '''Return -1, 0 or 1 as self is less than, equal to or greater than y.'''
        y = Rat._from(y)
        sx, sy = self.sign(), y.sign()
        if sx != sy:
            return -1 if sx < sy else 1
        if sx == 0:
            return 0
        if self._den == y._den:
            return self._num.cmp(y._num)
        return self._num.mul(y._den).cmp(y._num.mul(self._den))

    ##
    ## Conversions
    ##

    @classmethod
    def from_float(cls, value):
        '''Return the exact value of a float, or None if it is an infinity or NaN.'''
        if value != value or value in (float('inf'), float('-inf')):
            return None
        neg, m, e = split_float(value)
        if e >= 0:
            return cls._make(Int._make(neg, nat.shl(m, e)), ONE)
        return cls(Int._make(neg, m), Int._make(False, nat.shl([1], -e)))

    def float64(self):
        '''Return (f, exact): the float nearest to self, ties to even, and whether it equals
        self exactly.'''
        return self._to_native(53, 11)

    def float32(self):
        '''Return (f, exact): the single-precision value nearest to self, ties to even, as a
        Python float, and whether it equals self exactly.'''
        return self._to_native(24, 8)

    def _to_native(self, mbits, ebits):
        f, direction = quotient_to_native(self._num._abs, self._den._abs, mbits, ebits)
        if self._num._neg:
            f = -f
        return f, direction == 0

    def float_string(self, prec):
        '''Return self in fixed-point notation with prec digits after the point, rounding
        the last digit half away from zero.'''
        if self.is_int():
            text = self._num.text()
            return text + '.' + '0' * prec if prec > 0 else text

        q, r = nat.divide(self._num._abs, self._den._abs)
        p = [1]
        if prec > 0:
            p = nat.exp([10], nat.from_int(prec))
        r, r2 = nat.divide(nat.mul(r, p), self._den._abs)
        # see if we need to round up
        if nat.cmp(self._den._abs, nat.add(r2, r2)) <= 0:
            r = nat.add_word(r, 1)
            if nat.cmp(r, p) >= 0:
                q = nat.add_word(q, 1)
                r = nat.sub(r, p)

        text = ('-' if self._num._neg else '') + nat.itoa(q)
        if prec > 0:
            digits = nat.itoa(r)
            text += '.' + '0' * (prec - len(digits)) + digits
        return text

    def rat_string(self):
        '''Return "a/b", or "a" if the denominator is 1.'''
        if self.is_int():
            return self._num.text()
        return str(self)

    @classmethod
    def parse(cls, text):
        '''Parse text as a fraction "a/b", where a may be signed and both parts are integers
        with optional base prefixes, or as a floating point number with an optional 'e'
        decimal or 'p' binary exponent.  Raises ParseError.'''
        try:
            return cls._parse(text)
        except ParseError as e:
            logger.debug('cannot parse %r as a Rat: %s', text, e.reason)
            raise

    @classmethod
    def _parse(cls, text):
        if not text:
            raise ParseError(text, 0, 0, 'empty string')

        sep = text.find('/')
        if sep >= 0:
            num = Int.parse(text[:sep], 0)
            den, base, _, pos = nat.scan(text, sep + 1, 0, False)
            if pos != len(text):
                raise ParseError(text, pos, base, 'unexpected character')
            if not den:
                raise ParseError(text, sep + 1, base, 'zero denominator')
            return cls(num, Int._make(False, den))

        neg, pos = scan_sign(text, 0)
        mant, base, fcount, pos = nat.scan(text, pos, 0, True)
        exp_pos = pos
        exp, ebase, pos = scan_exponent(text, pos, True)
        if pos != len(text):
            raise ParseError(text, pos, base, 'unexpected character')
        if not mant:
            return cls()

        # The radix point divides by base**-fcount and the exponent multiplies by
        # ebase**exp.  Powers of 10 are split into powers of 2 and 5.
        exp2 = exp5 = 0
        if fcount < 0:
            if base == 10:
                exp5 = exp2 = fcount
            else:
                exp2 = fcount * (base.bit_length() - 1)
        if ebase == 10:
            exp5 += exp
        exp2 += exp

        if abs(exp5) > MAX_EXP5 or abs(exp2) > MAX_EXP2:
            raise ParseError(text, exp_pos, base, 'exponent too large')

        den = [1]
        if exp5 > 0:
            mant = nat.mul(mant, nat.exp([5], nat.from_int(exp5)))
        elif exp5 < 0:
            den = nat.exp([5], nat.from_int(-exp5))
        if exp2 > 0:
            mant = nat.shl(mant, exp2)
        elif exp2 < 0:
            den = nat.shl(den, -exp2)
        return cls(Int._make(neg, mant), Int._make(False, den))

    def as_integer_ratio(self):
        return int(self._num), int(self._den)

    ##
    ## Python numeric protocol
    ##

    def __repr__(self):
        return f'Rat({self._num}, {self._den})'

    def __str__(self):
        return f'{self._num}/{self._den}'

    def __float__(self):
        return self.float64()[0]

    def __bool__(self):
        return bool(self._num)

    def __hash__(self):
        return hash(Fraction(*self.as_integer_ratio()))

    def _compare(self, other):
        if isinstance(other, (Rat, Int, int, Fraction)):
            return self.cmp(other)
        if isinstance(other, float):
            value = Rat.from_float(other)
            if value is None:
                # Infinities order normally and NaN is unordered
                if other != other:
                    return None
                return -1 if other > 0 else 1
            return self.cmp(value)
        return NotImplemented

    def __eq__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c == 0

    def __ne__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c != 0

    def __lt__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c is not None and c < 0

    def __le__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c is not None and c <= 0

    def __gt__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c is not None and c > 0

    def __ge__(self, other):
        c = self._compare(other)
        if c is NotImplemented:
            return c
        return c is not None and c >= 0

    def __neg__(self):
        return self.neg()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __add__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return self.add(other)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return self.sub(other)

    def __rsub__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return Rat._from(other).sub(self)

    def __mul__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return self.mul(other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return self.quo(other)

    def __rtruediv__(self, other):
        if not isinstance(other, (Rat, Int, int, Fraction)):
            return NotImplemented
        return Rat._from(other).quo(self)


ONE = Int(1)


def _reduce(num, den):
    '''Return (num, den) as Ints in lowest terms with den positive.'''
    num, den = Int._from(num), Int._from(den)
    if not den:
        raise DivisionByZero('zero denominator')
    if den.sign() < 0:
        num, den = num.neg(), den.neg()
    if not num:
        return num, ONE
    g = nat.gcd(num._abs, den._abs)
    if len(g) == 1 and g[0] == 1:
        return num, den
    return (Int._make(num._neg, nat.divide(num._abs, g)[0]),
            Int._make(False, nat.divide(den._abs, g)[0]))
