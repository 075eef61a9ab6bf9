#
# Conversions between values, text and native floats shared by Int, Rat and Float
#
# (c) The bignum authors 2026.  All rights reserved.
#

import math
import re

import attr

from . import nat
from .errors import DivisionByZero, ParseError


__all__ = ('scan_sign', 'scan_exponent', 'DecimalDigits', 'round_shortest',
           'pow5_bounds', 'shr_ceil', 'bounded_decimal',
           'fmt_e', 'fmt_f', 'fmt_b', 'fmt_p', 'split_float', 'quotient_to_native',
           'FormatSpec')


FORMAT_SPEC_REGEX = re.compile(
    # [[fill]align]
    '(?:(?P<fill>.)?(?P<align>[<>=^]))?'
    # [sign][#][0][width]
    '(?P<sign>[-+ ])?(?P<alternate>#)?(?P<zero>0)?(?P<width>[0-9]+)?'
    # [grouping][.precision][type]
    '(?P<grouping>[,_])?(?:\\.(?P<precision>[0-9]+))?(?P<type>[a-zA-Z%])?$',
    re.DOTALL
)

WORD_BITS = nat.WORD_BITS
HALF_WORD = 1 << (WORD_BITS - 1)

LOG2_10 = math.log2(10)


#
# Scanning
#

def scan_sign(text, pos):
    '''Return (neg, pos) after an optional leading '+' or '-'.'''
    if pos < len(text) and text[pos] in '+-':
        return text[pos] == '-', pos + 1
    return False, pos


def scan_exponent(text, pos, base2_ok):
    '''Scan an optional exponent: 'e' or 'E' for a decimal exponent, and if base2_ok, 'p' or
    'P' for a binary one, followed by an optionally signed decimal integer.

    Return (exp, base, pos).  Without an exponent the result is (0, 10, pos).
    '''
    if pos >= len(text):
        return 0, 10, pos
    ch = text[pos]
    if ch in 'eE':
        base = 10
    elif ch in 'pP' and base2_ok:
        base = 2
    else:
        return 0, 10, pos

    neg, pos = scan_sign(text, pos + 1)
    start = pos
    while pos < len(text) and '0' <= text[pos] <= '9':
        pos += 1
    if pos == start:
        raise ParseError(text, pos, 10, 'exponent has no digits')
    exp = int(text[start:pos])
    return (-exp if neg else exp), base, pos


#
# Decimal digit strings
#

@attr.s(slots=True)
class DecimalDigits:
    '''An exact or rounded decimal representation 0.digits * 10**exp.  digits has no
    trailing zeros; the empty string is zero.'''

    digits = attr.ib(default='')
    exp = attr.ib(default=0)

    @classmethod
    def from_binary(cls, m, shift):
        '''Return the exact decimal value of the digit vector m times 2**shift.'''
        if not m:
            return cls()
        if shift < 0:
            # Remove trailing zero bits first to reduce the power of 5 needed
            s = min(-shift, nat.trailing_zero_bits(m))
            m = nat.shr(m, s)
            shift += s
        if shift > 0:
            m = nat.shl(m, shift)
            shift = 0
        if shift < 0:
            # m * 2**shift == m * 5**-shift * 10**shift
            m = nat.mul(m, nat.exp([5], nat.from_int(-shift)))
        s = nat.itoa(m, 10)
        return cls(s.rstrip('0'), len(s) + shift)

    def at(self, i):
        if 0 <= i < len(self.digits):
            return self.digits[i]
        return '0'

    def _should_round_up(self, n):
        if self.digits[n] == '5' and n + 1 == len(self.digits):
            # exactly halfway - round to even
            return n > 0 and int(self.digits[n - 1]) & 1 == 1
        # not halfway - the digit tells all as there are no trailing zeros
        return self.digits[n] >= '5'

    def round(self, n):
        '''Round to n digits, ties to even.'''
        if 0 <= n < len(self.digits):
            if self._should_round_up(n):
                self.round_up(n)
            else:
                self.round_down(n)

    def round_up(self, n):
        if not 0 <= n < len(self.digits):
            return
        # find the first digit < '9'
        while n > 0 and self.digits[n - 1] == '9':
            n -= 1
        if n == 0:
            # all digits are '9's
            self.digits = '1'
            self.exp += 1
        else:
            self.digits = self.digits[:n - 1] + chr(ord(self.digits[n - 1]) + 1)

    def round_down(self, n):
        if 0 <= n < len(self.digits):
            self.digits = self.digits[:n].rstrip('0')


def round_shortest(d, mant, exp, prec):
    '''Round d, the exact decimal value of the float 0.mant * 2**exp of precision prec, to
    the shortest digit string that rounds back to the same float under ties-to-even.'''
    if not d.digits:
        return

    # Scale so that the lsb of m is 1/2 ulp at precision prec
    m = mant
    e = exp - nat.bit_len(m)
    s = nat.bit_len(m) - (prec + 1)
    if s < 0:
        m = nat.shl(m, -s)
    elif s > 0:
        m = nat.shr(m, s)
    e += s

    upper = DecimalDigits.from_binary(nat.add_word(m, 1), e)
    if nat.trailing_zero_bits(m) == prec:
        # Powers of two have a closer neighbour below: 1/4 ulp rather than 1/2 ulp
        lower = DecimalDigits.from_binary(nat.sub(nat.shl(m, 1), [1]), e - 1)
    else:
        lower = DecimalDigits.from_binary(nat.sub(m, [1]), e)

    # The bounds round to the original value only if its mantissa is even
    inclusive = nat.bit(m, 1) == 0

    # Find the first digit where d has distinguished itself from both bounds
    for i, digit in enumerate(d.digits):
        lo = lower.at(i)
        hi = upper.at(i)
        ok_down = lo != digit or inclusive and i + 1 == len(lower.digits)
        ok_up = digit != hi and (inclusive or ord(digit) + 1 < ord(hi)
                                 or i + 1 < len(upper.digits))
        if ok_down and ok_up:
            d.round(i + 1)
            return
        if ok_down:
            d.round_down(i + 1)
            return
        if ok_up:
            d.round_up(i + 1)
            return


#
# Rounding from bounds.  Large powers of 5 are carried to a limited precision, with the
# exact result bracketed by a lower and an upper bound.  Only when the bounds disagree
# on the rounding must the value be expanded in full.
#

def shr_ceil(x, s):
    '''Return x >> s rounded up.'''
    q = nat.shr(x, s)
    return nat.add_word(q, 1) if nat.sticky(x, s) else q


def pow5_bounds(k, prec):
    '''Return (lo, hi, e) where lo * 2**e <= 5**k <= hi * 2**e.  lo and hi have at most
    about prec bits, and are equal when 5**k fits in that.'''
    lo = hi = [1]
    e = 0
    for i in range(k.bit_length() - 1, -1, -1):
        lo, hi, e = nat.sqr(lo), nat.sqr(hi), e * 2
        if (k >> i) & 1:
            lo, hi = nat.mul_word(lo, 5), nat.mul_word(hi, 5)
        shift = nat.bit_len(hi) - prec
        if shift > 0:
            lo, hi = nat.shr(lo, shift), shr_ceil(hi, shift)
            e += shift
    return lo, hi, e


def _shift_bounds(lo, hi, shift):
    if shift >= 0:
        return nat.shl(lo, shift), nat.shl(hi, shift)
    return nat.shr(lo, -shift), shr_ceil(hi, -shift)


def _decimal_bounds(m, e, s, prec):
    '''Return (lo, hi) bracketing m * 2**e / 10**s scaled by 2**WORD_BITS.'''
    p_lo, p_hi, pe = pow5_bounds(abs(s), prec)
    if s <= 0:
        return _shift_bounds(nat.mul(m, p_lo), nat.mul(m, p_hi), e - s + pe + WORD_BITS)
    n_lo, n_hi = _shift_bounds(m, m, e - s - pe + WORD_BITS)
    hi, r = nat.divide(n_hi, p_lo)
    if r:
        hi = nat.add_word(hi, 1)
    return nat.divide(n_lo, p_hi)[0], hi


def bounded_decimal(m, e, s, sig=0):
    '''Return the DecimalDigits of m * 2**e, for a non-empty digit vector m, rounded half
    to even at the digit of weight 10**s.

    If sig is non-zero s is an estimate, corrected so that exactly sig significant digits
    precede the rounding position.  Return None if the bounds cannot decide the rounding.
    '''
    for _ in range(3):
        # bits in the quotient, plus the error the squarings in pow5_bounds accumulate
        qbits = max(nat.bit_len(m) + e - math.floor(s * LOG2_10), 0)
        prec = qbits + abs(s).bit_length() + 2 * WORD_BITS
        lo, hi = _decimal_bounds(m, e, s, prec)
        q = nat.shr(lo, WORD_BITS)
        if nat.cmp(q, nat.shr(hi, WORD_BITS)):
            return None
        text = nat.itoa(q, 10) if q else ''
        if sig and len(text) != sig:
            s += len(text) - sig
            continue
        # The low words are the fractions of the bounds
        if (hi[0] if hi else 0) < HALF_WORD:
            pass
        elif (lo[0] if lo else 0) > HALF_WORD:
            text = nat.itoa(nat.add_word(q, 1), 10)
        else:
            return None
        if not text:
            return DecimalDigits()
        return DecimalDigits(text.rstrip('0'), len(text) + s)
    return None


#
# Float text formats.  These output the magnitude only.
#

def fmt_e(fmt, prec, d):
    '''%e: d.ddddde+dd, with at least two exponent digits.'''
    parts = [d.digits[0] if d.digits else '0']
    if prec > 0:
        frac = d.digits[1:prec + 1]
        parts.append('.' + frac + '0' * (prec - len(frac)))
    exp = d.exp - 1 if d.digits else 0
    parts.append(f'{fmt}{"-" if exp < 0 else "+"}{abs(exp):02d}')
    return ''.join(parts)


def fmt_f(prec, d):
    '''%f: ddddd.dddd'''
    if d.exp > 0:
        m = min(len(d.digits), d.exp)
        text = d.digits[:m] + '0' * (d.exp - m)
    else:
        text = '0'
    if prec > 0:
        text += '.' + ''.join(d.at(d.exp + i) for i in range(prec))
    return text


def fmt_b(mant, exp, prec):
    '''%b: a decimal integer mantissa of exactly prec bits and a binary exponent.'''
    if not mant:
        return '0'
    m = mant
    w = len(mant) * nat.WORD_BITS
    if w < prec:
        m = nat.shl(m, prec - w)
    elif w > prec:
        m = nat.shr(m, w - prec)
    return f'{nat.itoa(m, 10)}p{exp - prec:+d}'


def fmt_p(mant, exp):
    '''%p: a hexadecimal fraction mantissa and a binary exponent, as in 0x.8p+1.'''
    if not mant:
        return '0'
    i = 0
    while mant[i] == 0:
        i += 1
    return f'0x.{nat.itoa(mant[i:], 16).rstrip("0")}p{exp:+d}'


#
# Native floats
#

def split_float(value):
    '''Return (neg, m, e) for a finite float where |value| == m * 2**e and m is a digit
    vector.'''
    neg = math.copysign(1.0, value) < 0
    if not value:
        return neg, [], 0
    fraction, e = math.frexp(abs(value))
    return neg, nat.from_int(int(fraction * (1 << 53))), e - 53


def quotient_to_native(a, b, mbits, ebits):
    '''Return (f, direction) where f is a / b rounded to nearest, ties to even, in the
    binary format with mbits of precision (including the implicit bit) and ebits of
    exponent, and direction is -1, 0 or 1 as f is below, equal to or above a / b.

    a and b are digit vectors and b is non-zero.  Denormals are produced as in the native
    format and results too large become infinity.
    '''
    msize = mbits - 1
    msize2 = mbits + 1
    bias = (1 << (ebits - 1)) - 1
    emin = 1 - bias
    emax = bias

    alen = nat.bit_len(a)
    if not alen:
        return 0.0, 0
    blen = nat.bit_len(b)
    if not blen:
        raise DivisionByZero('division by zero')

    # 1. Shift so the quotient has msize2 or msize2 + 1 bits: the significand, a rounding
    # bit and perhaps one more.
    exp = alen - blen
    shift = msize2 - exp
    if shift > 0:
        a = nat.shl(a, shift)
    elif shift < 0:
        b = nat.shl(b, -shift)

    # 2. Divide.  a / b == mantissa * 2**(exp - msize2) before the adjustment below.
    q, r = nat.divide(a, b)
    mantissa = nat.to_int(q)
    have_rem = bool(r)

    # 3. Drop the extra bit if the quotient was long.
    if mantissa >> msize2 == 1:
        if mantissa & 1:
            have_rem = True
        mantissa >>= 1
        exp += 1

    # Below half the smallest denormal
    if exp < emin - msize:
        return 0.0, -1

    # 4. Denormals lose precision.
    if exp <= emin:
        shift = emin - (exp - 1)
        if mantissa & ((1 << shift) - 1):
            have_rem = True
        mantissa >>= shift
        exp = emin + 1

    # Round half to even using the low bit of mantissa as the rounding bit
    direction = -1 if have_rem else 0
    if mantissa & 1:
        direction = -1
        if have_rem or mantissa & 2:
            direction = 1
            mantissa += 1
            if mantissa >= 1 << msize2:
                # Complete rollover 11...1 => 100...0
                mantissa >>= 1
                exp += 1
    mantissa >>= 1

    if exp - 1 > emax:
        return math.inf, 1
    return math.ldexp(mantissa, exp - mbits), direction


#
# Format specifications
#

@attr.s(slots=True, kw_only=True, eq=False)
class FormatSpec:
    '''A parsed Python format specification, as accepted by __format__ methods.'''

    # The padding character
    fill = attr.ib(default=' ')
    # One of '<', '>', '=' or '^', or None for the default of right alignment
    align = attr.ib(default=None)
    # '-' shows the sign of negative numbers only, '+' of all numbers, and ' ' shows a
    # space for non-negative numbers
    sign = attr.ib(default='-')
    # Select the alternate form, which for integers adds a base prefix
    alternate = attr.ib(default=False)
    # The minimum width of the output
    width = attr.ib(default=0)
    # The precision, if given
    precision = attr.ib(default=None)
    # The presentation type character, or the empty string
    type = attr.ib(default='')

    @classmethod
    def parse(cls, spec):
        match = FORMAT_SPEC_REGEX.match(spec)
        if not match:
            raise ValueError(f'invalid format specifier {spec!r}')
        if match.group('grouping'):
            raise ValueError('grouping is not supported')
        fill, align = match.group('fill'), match.group('align')
        if match.group('zero') and not align:
            fill, align = '0', '='
        precision = match.group('precision')
        return cls(fill=fill or ' ', align=align,
                   sign=match.group('sign') or '-',
                   alternate=bool(match.group('alternate')),
                   width=int(match.group('width') or 0),
                   precision=None if precision is None else int(precision),
                   type=match.group('type') or '')

    def pad(self, neg, prefix, body):
        '''Return sign, prefix and body padded to the width.'''
        if neg:
            sign = '-'
        else:
            sign = '' if self.sign == '-' else self.sign
        lead = sign + prefix
        n = self.width - len(lead) - len(body)
        if n <= 0:
            return lead + body
        align = self.align or '>'
        if align == '=':
            return lead + self.fill * n + body
        text = lead + body
        if align == '<':
            return text + self.fill * n
        if align == '>':
            return self.fill * n + text
        return self.fill * (n // 2) + text + self.fill * (n - n // 2)
