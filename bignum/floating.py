#
# Arbitrary-precision binary floating point
#
# (c) The bignum authors 2026.  All rights reserved.
#

import logging
import math
from enum import IntEnum
from fractions import Fraction

import attr

from . import nat
from .context import (Accuracy, Flags, RoundingMode, get_context, local_context,
                      ABOVE, BELOW, EXACT, TO_NEAREST_AWAY, TO_NEAREST_EVEN,
                      TO_NEGATIVE_INF, TO_POSITIVE_INF, TO_ZERO)
from .convert import (DecimalDigits, FormatSpec, fmt_b, fmt_e, fmt_f, fmt_p,
                      bounded_decimal, pow5_bounds, round_shortest, scan_exponent,
                      scan_sign, split_float)
from .errors import (InvalidAdd, InvalidConversion, InvalidDivide, InvalidMultiply,
                     ParseError, PreconditionError)
from .integer import Int
from .rational import Rat


__all__ = ('Float', 'Form', 'new_float', 'parse_float',
           'MIN_EXP', 'MAX_EXP', 'MAX_PREC')

logger = logging.getLogger(__name__)

WORD_BITS = nat.WORD_BITS
# Set in the top word of a finite float's mantissa
TOP_BIT = 1 << (WORD_BITS - 1)

# The exponent range is that of a signed 32-bit integer
MIN_EXP = -(1 << 31)
MAX_EXP = (1 << 31) - 1
MAX_PREC = (1 << 32) - 1

LOG2_5 = math.log2(5)
LOG10_2 = math.log10(2)

# Operation names
OP_ADD = 'add'
OP_SUB = 'sub'
OP_MUL = 'mul'
OP_QUO = 'quo'
OP_SET_FLOAT64 = 'set_float64'

# Text formats handled by conversion to decimal
DECIMAL_FORMATS = ('e', 'E', 'f', 'g', 'G')
# Python format types with no text() counterpart of the same name
TEXT_FORMATS = {'': 'g', 'F': 'f'}

# When precision is lost during a calculation these indicate what fraction of the LSB the
# lost bits represented.  It essentially combines the roles of rounding and sticky bits.
LF_EXACTLY_ZERO = 0           # 000000
LF_LESS_THAN_HALF = 1         # 0xxxxx  x's not all zero
LF_EXACTLY_HALF = 2           # 100000
LF_MORE_THAN_HALF = 3         # 1xxxxx  x's not all zero


class Form(IntEnum):
    ZERO = 0
    FINITE = 1
    INF = 2


def _default_rounding():
    return get_context().rounding


def _check_prec(instance, attribute, value):
    if not isinstance(value, int) or not 0 <= value <= MAX_PREC:
        raise PreconditionError(f'precision must be an integer in [0, {MAX_PREC}], '
                                f'not {value!r}')


def _check_form(instance, attribute, value):
    if not isinstance(value, Form):
        raise PreconditionError(f'form must be a Form, not {value!r}')


@attr.s(slots=True, frozen=True, eq=False, repr=False, kw_only=True)
class Float:
    '''An arbitrary-precision binary floating point number.

    A finite non-zero value is (-1)**neg * 0.mant * 2**exp where mant is a digit vector
    whose top word has its most significant bit set, so the mantissa lies in [0.5, 1).
    prec is the number of significant bits kept, and mode the rounding mode applied, when
    this float is the destination of an operation.

    Floats are immutable.  An operation is invoked on its destination, which supplies
    the precision and rounding mode, and returns a new float:

        z = Float(prec=200, mode=TO_ZERO)
        z = z.add(x, y)

    The result's acc records whether it is below, equal to or above the exact result of
    that operation.  If the destination's precision is 0 the result adopts the larger
    operand precision, or for conversions the natural precision of the source.

    A float constructed without a mode takes the rounding mode of the current thread's
    context.  That is TO_NEAREST_EVEN unless the context has been changed, so Float() is
    +0 with precision 0 rounding to nearest even under DefaultContext.

    There is no NaN.  Operations that would produce one raise an InvalidOperation
    subclass instead.
    '''

    # Precision in bits; 0 means unset
    prec = attr.ib(default=0, validator=_check_prec)
    # Rounding mode used when this float is the destination of an operation
    mode = attr.ib(default=attr.Factory(_default_rounding), converter=RoundingMode)
    # Accuracy of the operation that produced this value
    acc = attr.ib(default=EXACT, converter=Accuracy)
    form = attr.ib(default=Form.ZERO, validator=_check_form)
    neg = attr.ib(default=False)
    # Normalized mantissa; empty unless finite
    mant = attr.ib(default=attr.Factory(list))
    exp = attr.ib(default=0)

    def __attrs_post_init__(self):
        '''Validate the mantissa and exponent against the form.'''
        if self.form == Form.FINITE:
            if not self.mant or not TOP_BIT <= self.mant[-1] <= nat.WORD_MASK:
                raise PreconditionError('the mantissa of a finite float must be a digit '
                                        'vector with its top bit set')
            if not isinstance(self.exp, int) or not MIN_EXP <= self.exp <= MAX_EXP:
                raise PreconditionError(f'exponent {self.exp!r} out of range')
        elif self.mant or self.exp != 0:
            raise PreconditionError(f'a {self.form.name} float has no mantissa or exponent')

    ##
    ## Setters.  Each returns a new float with this float's precision and rounding mode.
    ##

    def set(self, x):
        '''Return x rounded to this float's precision, or with x's precision if unset.'''
        x = _check_float(x)
        return _convert(x, self.prec or x.prec, self.mode)

    def set_int(self, x):
        '''Return the Int or int x rounded to this float's precision.  If unset the precision
        becomes the larger of the bit length of x and 64.'''
        x = Int._from(x)
        bits = x.bit_len()
        prec = self.prec or max(bits, 64)
        if not bits:
            return Float(prec=prec, mode=self.mode)
        return _finish(prec, self.mode, x._neg, x._abs, 0)

    def set_rat(self, x):
        '''Return the Rat x rounded to this float's precision.  If unset the precision becomes
        the larger of the bit lengths of its numerator and denominator, and 64.'''
        x = Rat._from(x)
        if x.is_int():
            return self.set_int(x.numerator)
        a = Float().set_int(x.numerator)
        b = Float().set_int(x.denominator)
        return Float(prec=self.prec or max(a.prec, b.prec), mode=self.mode).quo(a, b)

    def set_float64(self, x):
        '''Return the float x rounded to this float's precision, 53 if unset.  A NaN raises
        InvalidConversion.'''
        if x != x:
            _invalid(InvalidConversion, (OP_SET_FLOAT64, x))
        prec = self.prec or 53
        neg = math.copysign(1.0, x) < 0
        if not x:
            return Float(prec=prec, mode=self.mode, neg=neg)
        if math.isinf(x):
            return Float(prec=prec, mode=self.mode, form=Form.INF, neg=neg)
        _, m, e = split_float(x)
        return _finish(prec, self.mode, neg, m, e)

    def set_inf(self, neg=False):
        '''Return an infinity of the given sign with this float's precision.'''
        return Float(prec=self.prec, mode=self.mode, form=Form.INF, neg=neg)

    def set_prec(self, prec):
        '''Return self rounded to prec bits under this float's mode.  Precision 0 maps all
        finite values to a zero of the same sign.  Precisions above MAX_PREC are clamped.'''
        if prec < 0:
            raise PreconditionError('negative precision')
        if prec == 0:
            if self.form == Form.FINITE:
                return Float(mode=self.mode, neg=self.neg, acc=ABOVE if self.neg else BELOW)
            return attr.evolve(self, prec=0, acc=EXACT)
        prec = min(prec, MAX_PREC)
        if self.form == Form.FINITE:
            return _round(prec, self.mode, self.neg, self.mant, self.exp, 0)
        return attr.evolve(self, prec=prec, acc=EXACT)

    def set_mode(self, mode):
        '''Return self with a different rounding mode.  The value is unchanged.'''
        return attr.evolve(self, mode=mode, acc=EXACT)

    def set_mant_exp(self, mant, exp):
        '''Return mant * 2**exp rounded to this float's precision.  The inverse of
        mant_exp().'''
        z = self.set(mant)
        if z.form != Form.FINITE:
            return z
        exp += z.exp
        if exp < MIN_EXP:
            return _underflow(z.prec, z.mode, z.neg)
        if exp > MAX_EXP:
            return _overflow(z.prec, z.mode, z.neg)
        return attr.evolve(z, exp=exp)

    def set_string(self, text):
        '''Return text parsed with base 0; see parse().'''
        return self.parse(text, 0)[0]

    def parse(self, text, base=0):
        '''Parse text as a floating point number and return (f, base).

        text has an optional sign, then a mantissa of digits in base with an optional radix
        point, then an optional exponent: 'e' or 'E' for a power of ten, or 'p' or 'P' for a
        power of two.  base is 0, 2, 8, 10 or 16; with base 0 a "0b", "0o" or "0x" prefix
        selects the base, and otherwise it is 10.  "Inf" and "infinity", in any case and
        optionally signed, give infinities.

        The result is rounded once, correctly, to this float's precision, or to the
        context's parse_precision if unset.  Raises ParseError.
        '''
        if base not in (0, 2, 8, 10, 16):
            raise PreconditionError(f'invalid base {base}')
        prec = self.prec or get_context().parse_precision
        try:
            return _parse(text, base, prec, self.mode)
        except ParseError as e:
            logger.debug('cannot parse %r as a Float: %s', text, e.reason)
            raise

    ##
    ## Arithmetic
    ##

    def add(self, x, y):
        '''Return x + y rounded to this float's precision and mode.'''
        return self._add_sub((OP_ADD, x, y), x, y, False)

    def sub(self, x, y):
        '''Return x - y rounded to this float's precision and mode.'''
        return self._add_sub((OP_SUB, x, y), x, y, True)

    def _add_sub(self, op_tuple, x, y, is_subtract):
        x, y = _check_float(x), _check_float(y)
        prec = self.prec or max(x.prec, y.prec)
        mode = self.mode
        y_neg = y.neg != is_subtract

        if x.form == Form.FINITE and y.form == Form.FINITE:
            return _add_finite(prec, mode, x, y, y_neg)

        if x.form == Form.INF and y.form == Form.INF and x.neg != y_neg:
            _invalid(InvalidAdd, op_tuple)

        if x.form == Form.ZERO and y.form == Form.ZERO:
            # Like-signed zeroes keep their sign.  Otherwise the sum is +0 unless rounding
            # towards negative infinity.
            neg = x.neg if x.neg == y_neg else mode == TO_NEGATIVE_INF
            return Float(prec=prec, mode=mode, neg=neg)

        if x.form == Form.INF or y.form == Form.ZERO:
            return _convert(x, prec, mode)
        return _convert(y, prec, mode, y_neg)

    def mul(self, x, y):
        '''Return x * y rounded to this float's precision and mode.'''
        x, y = _check_float(x), _check_float(y)
        prec = self.prec or max(x.prec, y.prec)
        neg = x.neg != y.neg

        if x.form == Form.FINITE and y.form == Form.FINITE:
            lsb_exp = x.exp + y.exp - (len(x.mant) + len(y.mant)) * WORD_BITS
            return _finish(prec, self.mode, neg, nat.mul(x.mant, y.mant), lsb_exp)

        if {x.form, y.form} == {Form.ZERO, Form.INF}:
            _invalid(InvalidMultiply, (OP_MUL, x, y))
        if Form.INF in (x.form, y.form):
            return Float(prec=prec, mode=self.mode, form=Form.INF, neg=neg)
        return Float(prec=prec, mode=self.mode, neg=neg)

    def quo(self, x, y):
        '''Return x / y rounded to this float's precision and mode.  A finite or infinite
        value divided by zero is an infinity.'''
        x, y = _check_float(x), _check_float(y)
        prec = self.prec or max(x.prec, y.prec)
        neg = x.neg != y.neg

        if x.form == Form.FINITE and y.form == Form.FINITE:
            # Scale the dividend so the quotient has at least prec + 2 bits; the remainder
            # then only contributes to the sticky bit.
            xm, ym = x.mant, y.mant
            k = max(0, prec + 2 + nat.bit_len(ym) - nat.bit_len(xm))
            q, r = nat.divide(nat.shl(xm, k), ym)
            lsb_exp = ((x.exp - len(xm) * WORD_BITS) - (y.exp - len(ym) * WORD_BITS) - k)
            return _finish(prec, self.mode, neg, q, lsb_exp, 1 if r else 0)

        if x.form == y.form:
            _invalid(InvalidDivide, (OP_QUO, x, y))
        if x.form == Form.ZERO or y.form == Form.INF:
            return Float(prec=prec, mode=self.mode, neg=neg)
        return Float(prec=prec, mode=self.mode, form=Form.INF, neg=neg)

    def neg_(self):
        '''Return -self.'''
        return attr.evolve(self, neg=not self.neg, acc=EXACT)

    def abs(self):
        return attr.evolve(self, neg=False, acc=EXACT)

    ##
    ## Queries
    ##

    def sign(self):
        '''Return -1, 0 or 1.  Both zeroes give 0.'''
        if self.form == Form.ZERO:
            return 0
        return -1 if self.neg else 1

    def signbit(self):
        return self.neg

    def is_inf(self):
        return self.form == Form.INF

    def is_int(self):
        '''Return True if self is an integer.  Infinities are not.'''
        if self.form != Form.FINITE:
            return self.form == Form.ZERO
        if self.exp <= 0:
            return False
        return self.prec <= self.exp or self.min_prec() <= self.exp

    def min_prec(self):
        '''Return the minimum precision needed to represent self exactly.'''
        if self.form != Form.FINITE:
            return 0
        return len(self.mant) * WORD_BITS - nat.trailing_zero_bits(self.mant)

    def cmp(self, y):
        '''Return -1, 0 or 1 as self is less than, equal to or greater than y.'''
        y = _check_float(y)
        mx, my = self._ord(), y._ord()
        if mx != my:
            return -1 if mx < my else 1
        # only if |mx| == 1 do the mantissas need comparing
        if mx == -1:
            return y._ucmp(self)
        if mx == 1:
            return self._ucmp(y)
        return 0

    def _ord(self):
        '''-2 for -Inf, -1 for negative finite values, 0 for zero, 1 for positive finite
        values and 2 for +Inf.'''
        if self.form == Form.ZERO:
            return 0
        m = 1 if self.form == Form.FINITE else 2
        return -m if self.neg else m

    def _ucmp(self, y):
        if self.exp != y.exp:
            return -1 if self.exp < y.exp else 1
        # Align the mantissas at their most significant words
        xm, ym = self.mant, y.mant
        if len(xm) < len(ym):
            xm = nat.shl(xm, (len(ym) - len(xm)) * WORD_BITS)
        elif len(ym) < len(xm):
            ym = nat.shl(ym, (len(xm) - len(ym)) * WORD_BITS)
        return nat.cmp(xm, ym)

    def mant_exp(self):
        '''Return (mant, exp) with self == mant * 2**exp and 0.5 <= |mant| < 1.  Zeroes and
        infinities return themselves and an exponent of 0.'''
        if self.form != Form.FINITE:
            return attr.evolve(self, acc=EXACT), 0
        return attr.evolve(self, exp=0, acc=EXACT), self.exp

    ##
    ## Conversions
    ##

    def int(self):
        '''Return (i, acc): self truncated towards zero as an Int, and the accuracy of i.
        Infinities return None for i.'''
        if self.form == Form.ZERO:
            return Int(), EXACT
        acc = ABOVE if self.neg else BELOW
        if self.form == Form.INF:
            return None, acc
        if self.exp <= 0:
            return Int(), acc
        all_bits = len(self.mant) * WORD_BITS
        if self.min_prec() <= self.exp:
            acc = EXACT
        if self.exp > all_bits:
            mag = nat.shl(self.mant, self.exp - all_bits)
        else:
            mag = nat.shr(self.mant, all_bits - self.exp)
        return Int._make(self.neg, mag), acc

    def int64(self):
        '''Return (i, acc): self truncated to an int saturated to the signed 64-bit range.'''
        return self._saturated_int(-(1 << 63), (1 << 63) - 1)

    def uint64(self):
        '''Return (i, acc): self truncated to an int saturated to the unsigned 64-bit
        range.'''
        return self._saturated_int(0, (1 << 64) - 1)

    def _saturated_int(self, lo, hi):
        i, acc = self.int()
        if i is None:
            return (lo, ABOVE) if self.neg else (hi, BELOW)
        value = int(i)
        if value < lo or (self.neg and lo == 0 and self.form == Form.FINITE):
            return lo, ABOVE
        if value > hi:
            return hi, BELOW
        return value, acc

    def rat(self):
        '''Return (r, acc): the exact value of self as a Rat.  Infinities return None.'''
        if self.form == Form.ZERO:
            return Rat(), EXACT
        if self.form == Form.INF:
            return None, ABOVE if self.neg else BELOW
        all_bits = len(self.mant) * WORD_BITS
        if self.exp >= all_bits:
            return Rat(Int._make(self.neg, nat.shl(self.mant, self.exp - all_bits))), EXACT
        den = Int._make(False, nat.shl([1], all_bits - self.exp))
        return Rat(Int._make(self.neg, self.mant), den), EXACT

    def float64(self):
        '''Return (f, acc): the float nearest to self, ties to even, and its accuracy.
        Values beyond the float range give an infinity and tiny values a zero, both signed.'''
        return self._to_native(53, 11)

    def float32(self):
        '''Return (f, acc): the single precision value nearest to self as a Python float.'''
        return self._to_native(24, 8)

    def _to_native(self, mbits, ebits):
        if self.form == Form.ZERO:
            return (-0.0 if self.neg else 0.0), EXACT
        if self.form == Form.INF:
            return (-math.inf if self.neg else math.inf), EXACT

        bias = (1 << (ebits - 1)) - 1
        emin, emax = 1 - bias, bias

        # Exponent for a mantissa in [1, 2)
        e = self.exp - 1
        p = mbits
        if e < emin:
            # Denormal before rounding; fewer bits of precision are available
            p = mbits - emin + e
            if p < 0 or p == 0 and not nat.sticky(self.mant, len(self.mant) * WORD_BITS - 1):
                # At most half the smallest denormal; ties go to even, which is zero
                return (-0.0, ABOVE) if self.neg else (0.0, BELOW)
            if p == 0:
                smallest = math.ldexp(1.0, emin - mbits + 1)
                return (-smallest, BELOW) if self.neg else (smallest, ABOVE)

        r = _round(p, TO_NEAREST_EVEN, self.neg, self.mant, self.exp, 0)
        e = r.exp - 1
        if r.form == Form.INF or e > emax:
            return (-math.inf, BELOW) if self.neg else (math.inf, ABOVE)
        # Rounding may have made a denormal normal
        p = mbits - emin + e if e < emin else mbits
        shift = len(r.mant) * WORD_BITS - p
        m = nat.shr(r.mant, shift) if shift >= 0 else nat.shl(r.mant, -shift)
        f = math.ldexp(nat.to_int(m), e - p + 1)
        return (-f if self.neg else f), r.acc

    def as_integer_ratio(self):
        if self.form == Form.INF:
            raise OverflowError('cannot convert an infinity to an integer ratio')
        r, _ = self.rat()
        return r.as_integer_ratio()

    def text(self, fmt='g', prec=10):
        '''Return self as text in the given format:

          'e'  -d.dddde+dd      decimal exponent, at least two exponent digits
          'E'  -d.ddddE+dd      as 'e' with an upper case E
          'f'  -ddddd.dddd      no exponent
          'g'  as 'e' for large exponents, otherwise as 'f'
          'G'  as 'E' for large exponents, otherwise as 'f'
          'b'  -ddddddp+dd      decimal integer mantissa of prec bits, binary exponent
          'p'  -0x.dddp+dd      hexadecimal fraction mantissa, binary exponent

        For 'e', 'E' and 'f' prec is the number of digits after the point, and for 'g'
        and 'G' the number of significant digits.  A negative prec outputs the fewest
        decimal digits that read back to self at its precision under ties-to-even.
        prec is ignored by 'b' and 'p'.  Infinities are "+Inf" and "-Inf".
        '''
        if self.form == Form.INF:
            return '-Inf' if self.neg else '+Inf'
        sign = '-' if self.neg else ''
        if fmt == 'b':
            return sign + fmt_b(self.mant, self.exp, self.prec)
        if fmt == 'p':
            return sign + fmt_p(self.mant, self.exp)
        if fmt not in DECIMAL_FORMATS:
            return '%' + fmt
        return sign + self._decimal_text(fmt, prec)

    def _exact_decimal(self):
        if self.form != Form.FINITE:
            return DecimalDigits()
        return DecimalDigits.from_binary(self.mant, self.exp - len(self.mant) * WORD_BITS)

    def _rounded_decimal(self, sig, places):
        '''Return the decimal digits of |self| rounded half to even to sig significant
        digits, or if sig is 0 to places digits after the point.'''
        if self.form != Form.FINITE:
            return DecimalDigits()
        if sig:
            # |self| lies in [2**(exp - 1), 2**exp)
            s = math.floor((self.exp - 1) * LOG10_2) + 1 - sig
        else:
            s = -places
        d = bounded_decimal(self.mant, self.exp - len(self.mant) * WORD_BITS, s, sig)
        if d is None:
            # Too close to a tie to decide without all the digits
            d = self._exact_decimal()
            d.round(sig if sig else d.exp + places)
        return d

    def _decimal_text(self, fmt, prec):
        shortest = prec < 0
        if shortest:
            d = self._exact_decimal()
            round_shortest(d, self.mant, self.exp, self.prec)
            if fmt in ('e', 'E'):
                prec = len(d.digits) - 1
            elif fmt == 'f':
                prec = max(len(d.digits) - d.exp, 0)
            else:
                prec = len(d.digits)
        elif fmt in ('e', 'E'):
            # one digit before the point and prec after
            d = self._rounded_decimal(1 + prec, 0)
        elif fmt == 'f':
            d = self._rounded_decimal(0, prec)
        else:
            prec = prec or 1
            d = self._rounded_decimal(prec, 0)

        if fmt in ('e', 'E'):
            return fmt_e(fmt, prec, d)
        if fmt == 'f':
            return fmt_f(prec, d)

        # %e is used if the exponent from the conversion is less than -4 or greater than
        # or equal to the precision; the shortest form decides with a precision of 6.
        eprec = prec
        if eprec > len(d.digits) and len(d.digits) >= d.exp:
            eprec = len(d.digits)
        if shortest:
            eprec = 6
        exp = d.exp - 1
        if exp < -4 or exp >= eprec:
            prec = min(prec, len(d.digits))
            return fmt_e('e' if fmt == 'g' else 'E', prec - 1, d)
        if prec > d.exp:
            prec = len(d.digits)
        return fmt_f(max(prec - d.exp, 0), d)

    ##
    ## Python numeric protocol
    ##

    def __repr__(self):
        return (f'<Float {self.text("g", -1)} prec={self.prec} mode={self.mode.name} '
                f'acc={self.acc.name}>')

    def __str__(self):
        return self.text('g', 10)

    def __format__(self, spec):
        fs = FormatSpec.parse(spec)
        fmt = fs.type
        if fmt in ('', 'b', 'p'):
            prec = -1
        elif fmt in DECIMAL_FORMATS or fmt == 'F':
            prec = 6 if fs.precision is None else fs.precision
        else:
            raise ValueError(f'unknown format code {fmt!r} for Float')
        if self.form == Form.INF:
            body = 'INF' if fmt in ('E', 'F', 'G') else 'inf'
        else:
            body = self.abs().text(TEXT_FORMATS.get(fmt, fmt), prec)
        return fs.pad(self.neg, '', body)

    def __float__(self):
        return self.float64()[0]

    def __int__(self):
        i, _ = self.int()
        if i is None:
            raise OverflowError('cannot convert an infinity to an integer')
        return int(i)

    __trunc__ = __int__

    def __bool__(self):
        return self.form != Form.ZERO

    def __hash__(self):
        '''Python hash.  Must hash equally to other types with the same value.'''
        if self.form == Form.INF:
            return hash(-math.inf if self.neg else math.inf)
        return hash(Fraction(*self.as_integer_ratio()))

    def __neg__(self):
        return self.neg_()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def _compare(self, other):
        '''Compare exactly with a Float or a Python number.  Returns -1, 0 or 1, None if
        unordered, or NotImplemented.'''
        if isinstance(other, Float):
            return self.cmp(other)
        if isinstance(other, float):
            if other != other:
                return None
            return self.cmp(Float().set_float64(other))
        if isinstance(other, (Int, int)):
            return self.cmp(Float().set_int(other))
        if isinstance(other, (Rat, Fraction)):
            if self.form == Form.INF:
                return -1 if self.neg else 1
            return self.rat()[0].cmp(other)
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

    def _arith(self, other, operation, reflected):
        '''Apply operation to self and other.  The result has the larger precision of two
        Floats, or self's precision if other is an exactly converted Python number.'''
        if isinstance(other, Float):
            dest = Float(prec=max(self.prec, other.prec), mode=self.mode)
        else:
            other = _exact_operand(other)
            if other is None:
                return NotImplemented
            dest = Float(prec=self.prec, mode=self.mode)
        if reflected:
            return operation(dest, other, self)
        return operation(dest, self, other)

    def __add__(self, other):
        return self._arith(other, Float.add, False)

    def __radd__(self, other):
        return self._arith(other, Float.add, True)

    def __sub__(self, other):
        return self._arith(other, Float.sub, False)

    def __rsub__(self, other):
        return self._arith(other, Float.sub, True)

    def __mul__(self, other):
        return self._arith(other, Float.mul, False)

    def __rmul__(self, other):
        return self._arith(other, Float.mul, True)

    def __truediv__(self, other):
        return self._arith(other, Float.quo, False)

    def __rtruediv__(self, other):
        return self._arith(other, Float.quo, True)


#
# Rounding
#

def round_up(mode, lost_fraction, neg, is_odd):
    '''Return True if, when an operation is inexact, the result should be rounded up (i.e.,
    away from zero by incrementing the mantissa).

    neg is the sign of the exact result, and is_odd indicates if the LSB of the truncated
    mantissa is set, which is needed for ties-to-even rounding.
    '''
    if lost_fraction == LF_EXACTLY_ZERO:
        return False

    if mode == TO_NEAREST_EVEN:
        if lost_fraction == LF_EXACTLY_HALF:
            return is_odd
        return lost_fraction == LF_MORE_THAN_HALF
    elif mode == TO_POSITIVE_INF:
        return not neg
    elif mode == TO_NEGATIVE_INF:
        return neg
    elif mode == TO_ZERO:
        return False
    elif mode == TO_NEAREST_AWAY:
        return lost_fraction != LF_LESS_THAN_HALF
    else:
        # AWAY_FROM_ZERO
        return True


def _round(prec, mode, neg, mant, exp, sbit):
    '''Return the float (-1)**neg * 0.mant * 2**exp rounded to prec bits.  mant is a digit
    vector with the msb of its top word set.  sbit is 1 if the exact value lies strictly
    above the value of mant, by less than the value of its lowest bit.'''
    bits = len(mant) * WORD_BITS
    if bits <= prec and not sbit:
        return Float(prec=prec, mode=mode, form=Form.FINITE, neg=neg, mant=mant, exp=exp)

    shift = bits - prec
    if shift > 0:
        kept = nat.shr(mant, shift)
        rbit = nat.bit(mant, shift - 1)
        sbit |= nat.sticky(mant, shift - 1)
    else:
        kept = nat.shl(mant, -shift)
        rbit = 0
    lost_fraction = rbit * 2 + sbit

    acc = EXACT
    if lost_fraction != LF_EXACTLY_ZERO:
        if round_up(mode, lost_fraction, neg, nat.bit(kept, 0)):
            acc = BELOW if neg else ABOVE
            kept = nat.add_word(kept, 1)
            if nat.bit_len(kept) > prec:
                # Mantissa overflow; the dropped bit is zero
                kept = nat.shr(kept, 1)
                exp += 1
                if exp > MAX_EXP:
                    return _overflow(prec, mode, neg)
        else:
            acc = ABOVE if neg else BELOW
        get_context().flags |= Flags.INEXACT

    mant = nat.shl(kept, -prec % WORD_BITS)
    return Float(prec=prec, mode=mode, acc=acc, form=Form.FINITE, neg=neg, mant=mant, exp=exp)


def _finish(prec, mode, neg, mag, lsb_exp, sbit=0):
    '''Return the float nearest (-1)**neg * mag * 2**lsb_exp, plus a sticky bit if sbit,
    rounded to prec bits.  mag is a non-empty digit vector.'''
    bits = nat.bit_len(mag)
    exp = lsb_exp + bits
    if exp < MIN_EXP:
        return _underflow(prec, mode, neg)
    if exp > MAX_EXP:
        return _overflow(prec, mode, neg)
    return _round(prec, mode, neg, nat.shl(mag, -bits % WORD_BITS), exp, sbit)


def _overflow(prec, mode, neg):
    logger.debug('exponent overflow at precision %d', prec)
    get_context().flags |= Flags.OVERFLOW | Flags.INEXACT
    return Float(prec=prec, mode=mode, form=Form.INF, neg=neg, acc=BELOW if neg else ABOVE)


def _underflow(prec, mode, neg):
    logger.debug('exponent underflow at precision %d', prec)
    get_context().flags |= Flags.UNDERFLOW | Flags.INEXACT
    return Float(prec=prec, mode=mode, neg=neg, acc=ABOVE if neg else BELOW)


def _convert(x, prec, mode, neg=None):
    '''Return x, negated to neg if given, rounded to prec bits under mode.'''
    if neg is None:
        neg = x.neg
    if x.form != Form.FINITE:
        return Float(prec=prec, mode=mode, form=x.form, neg=neg)
    return _round(prec, mode, neg, x.mant, x.exp, 0)


def _add_finite(prec, mode, x, y, y_neg):
    xm, xe = x.mant, x.exp
    ym, ye = y.mant, y.exp
    # An operand entirely below the other's rounding position only affects the sticky
    # bit; replace it by a single low bit to keep shifts bounded.
    if xe > ye:
        ym, ye = _sticky_operand(xm, xe, ym, ye, prec)
    elif ye > xe:
        xm, xe = _sticky_operand(ym, ye, xm, xe, prec)

    # Align both mantissas at the lower least significant bit
    ex = xe - len(xm) * WORD_BITS
    ey = ye - len(ym) * WORD_BITS
    if ex > ey:
        xm = nat.shl(xm, ex - ey)
        ex = ey
    elif ey > ex:
        ym = nat.shl(ym, ey - ex)

    if x.neg == y_neg:
        return _finish(prec, mode, x.neg, nat.add(xm, ym), ex)

    c = nat.cmp(xm, ym)
    if c == 0:
        # Exact cancellation gives +0, or -0 when rounding towards negative infinity
        return Float(prec=prec, mode=mode, neg=mode == TO_NEGATIVE_INF)
    if c > 0:
        return _finish(prec, mode, x.neg, nat.sub(xm, ym), ex)
    return _finish(prec, mode, y_neg, nat.sub(ym, xm), ex)


def _sticky_operand(big_mant, big_exp, mant, exp, prec):
    cutoff = big_exp - max(prec, len(big_mant) * WORD_BITS) - 2
    if exp < cutoff:
        # 2**(cutoff - 1)
        return [1 << (WORD_BITS - 1)], cutoff
    return mant, exp


#
# Parsing
#

def _parse(text, base, prec, mode):
    neg, pos = scan_sign(text, 0)
    if text[pos:].lower() in ('inf', 'infinity'):
        return Float(prec=prec, mode=mode, form=Form.INF, neg=neg), base

    mant, base, fcount, pos = nat.scan(text, pos, base, True)
    exp, ebase, pos = scan_exponent(text, pos, True)
    if pos != len(text):
        raise ParseError(text, pos, base, 'unexpected character')
    if not mant:
        return Float(prec=prec, mode=mode, neg=neg), base

    # The radix point divides by base**-fcount and the exponent multiplies by ebase**exp.
    # Powers of 10 are split into powers of 2 and 5.
    exp2 = exp5 = 0
    if fcount < 0:
        if base == 10:
            exp5 = exp2 = fcount
        else:
            exp2 = fcount * (base.bit_length() - 1)
    if ebase == 10:
        exp5 += exp
    exp2 += exp

    return _scale(prec, mode, neg, mant, exp2, exp5), base


def _scale(prec, mode, neg, mant, exp2, exp5):
    '''Return mant * 2**exp2 * 5**exp5 correctly rounded.'''
    if not exp5:
        return _finish(prec, mode, neg, mant, exp2)

    # Results certain to overflow or underflow need not compute 5**|exp5|
    estimate = exp2 + nat.bit_len(mant) + exp5 * LOG2_5
    if estimate > MAX_EXP + 2:
        return _overflow(prec, mode, neg)
    if estimate < MIN_EXP - 2:
        return _underflow(prec, mode, neg)

    work = prec + nat.bit_len(mant)
    if (abs(exp5) * LOG2_5 > 2 * work + 256
            and MIN_EXP + WORD_BITS < estimate < MAX_EXP - WORD_BITS):
        z = _scale_bounded(prec, mode, neg, mant, exp2, exp5, work + 2 * WORD_BITS)
        if z is not None:
            return z

    pow5 = nat.exp([5], nat.from_int(abs(exp5)))
    if exp5 > 0:
        return _finish(prec, mode, neg, nat.mul(mant, pow5), exp2)
    k = max(0, prec + 2 + nat.bit_len(pow5) - nat.bit_len(mant))
    q, r = nat.divide(nat.shl(mant, k), pow5)
    return _finish(prec, mode, neg, q, exp2 - k, 1 if r else 0)


def _scale_bounded(prec, mode, neg, mant, exp2, exp5, work):
    '''As _scale, but with the power of 5 carried to about work bits.  Return None if the
    bounds that gives on the result do not round to the same float.'''
    k = abs(exp5)
    p_lo, p_hi, pe = pow5_bounds(k, work + k.bit_length())
    if exp5 > 0:
        lo, hi = nat.mul(mant, p_lo), nat.mul(mant, p_hi)
        lsb_exp = exp2 + pe
    else:
        shift = max(0, work + nat.bit_len(p_hi) - nat.bit_len(mant))
        num = nat.shl(mant, shift)
        lo = nat.divide(num, p_hi)[0]
        hi, r = nat.divide(num, p_lo)
        if r:
            hi = nat.add_word(hi, 1)
        lsb_exp = exp2 - pe - shift

    # Rounding the bounds must not raise flags in the caller's context
    with local_context():
        z = _finish(prec, mode, neg, lo, lsb_exp)
        if z.cmp(_finish(prec, mode, neg, hi, lsb_exp)):
            return None
        lower = _finish(nat.bit_len(lo), mode, False, lo, lsb_exp)
        upper = _finish(nat.bit_len(hi), mode, False, hi, lsb_exp)

    # Only used where 5**|exp5| is far wider than prec, so the result is never exact
    mag = z.abs()
    if mag.cmp(upper) > 0:
        acc = BELOW if neg else ABOVE
    elif mag.cmp(lower) < 0:
        acc = ABOVE if neg else BELOW
    else:
        return None
    get_context().flags |= Flags.INEXACT
    return attr.evolve(z, acc=acc)


#
# Helpers
#

def _invalid(exc_class, op_tuple):
    get_context().flags |= Flags.INVALID
    raise exc_class(op_tuple)


def _check_float(value):
    if not isinstance(value, Float):
        raise TypeError(f'expected a Float, not {type(value).__name__}')
    return value


def _exact_operand(value):
    '''Convert a Python number exactly to a Float, or return None.'''
    if isinstance(value, (Int, int)):
        return Float().set_int(value)
    if isinstance(value, float):
        return Float().set_float64(value)
    return None


def new_float(x):
    '''Return the float x as a Float of precision 53, rounding to nearest even.'''
    return Float(prec=53, mode=TO_NEAREST_EVEN).set_float64(x)


def parse_float(text, base=0, prec=0, mode=TO_NEAREST_EVEN):
    '''Parse text with the given base, precision and rounding mode; return (f, base).'''
    return Float(prec=prec, mode=mode).parse(text, base)
