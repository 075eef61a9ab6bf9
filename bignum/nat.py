#
# Digit vectors: unsigned multi-word arithmetic
#
# A digit vector is a list of WORD_BITS-bit words, least significant first, with no
# high zero words.  The empty list is zero and no other representation of zero is
# valid.  No function here modifies its arguments; results are always fresh lists.
#
# (c) The bignum authors 2026.  All rights reserved.
#

import random

from .errors import DivisionByZero, ParseError, PreconditionError


__all__ = ('WORD_BITS', 'WORD_MASK', 'MAX_BASE', 'KARATSUBA_THRESHOLD',
           'norm', 'from_int', 'to_int', 'cmp', 'add', 'sub', 'add_word', 'mul_word',
           'mul_add_word', 'mul', 'sqr', 'divide_word', 'mod_word', 'divide', 'shl',
           'shr', 'bit_len', 'trailing_zero_bits', 'bit', 'sticky', 'set_bit', 'and_',
           'or_', 'xor', 'and_not', 'exp', 'gcd', 'mul_range', 'random_below',
           'probably_prime', 'itoa', 'scan', 'from_bytes', 'to_bytes')


WORD_BITS = 32
WORD_BASE = 1 << WORD_BITS
WORD_MASK = WORD_BASE - 1
MAX_BASE = 36

# Operands with at least this many words are multiplied with Karatsuba's method
KARATSUBA_THRESHOLD = 40

DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'

# Product of small odd primes that fits in a word, for trial division
SMALL_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29)
SMALL_PRIMES_PRODUCT = 3 * 5 * 7 * 11 * 13 * 17 * 19 * 23 * 29
PRIME_BIT_MASK = sum(1 << p for p in (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41,
                                      43, 47, 53, 59, 61))


def norm(z):
    '''Strip high zero words from a freshly built vector and return it.'''
    n = len(z)
    while n and z[n - 1] == 0:
        n -= 1
    del z[n:]
    return z


def from_int(value):
    if value < 0:
        raise PreconditionError('digit vectors are unsigned')
    z = []
    while value:
        z.append(value & WORD_MASK)
        value >>= WORD_BITS
    return z


def to_int(x):
    result = 0
    for word in reversed(x):
        result = (result << WORD_BITS) | word
    return result


def cmp(x, y):
    '''Return -1, 0 or 1 as x is less than, equal to or greater than y.'''
    m, n = len(x), len(y)
    if m != n:
        return -1 if m < n else 1
    for i in range(m - 1, -1, -1):
        if x[i] != y[i]:
            return -1 if x[i] < y[i] else 1
    return 0


#
# Addition and subtraction
#

def add(x, y):
    if len(x) < len(y):
        x, y = y, x
    z = []
    carry = 0
    for i, yi in enumerate(y):
        t = x[i] + yi + carry
        z.append(t & WORD_MASK)
        carry = t >> WORD_BITS
    for i in range(len(y), len(x)):
        t = x[i] + carry
        z.append(t & WORD_MASK)
        carry = t >> WORD_BITS
    if carry:
        z.append(carry)
    return z


def sub(x, y):
    '''Return x - y.  x must not be less than y.'''
    if len(x) < len(y):
        raise PreconditionError('digit vector subtraction underflow')
    z = []
    borrow = 0
    for i, yi in enumerate(y):
        t = x[i] - yi - borrow
        z.append(t & WORD_MASK)
        borrow = 1 if t < 0 else 0
    for i in range(len(y), len(x)):
        t = x[i] - borrow
        z.append(t & WORD_MASK)
        borrow = 1 if t < 0 else 0
    if borrow:
        raise PreconditionError('digit vector subtraction underflow')
    return norm(z)


def add_word(x, w):
    return add(x, [w]) if w else list(x)


#
# Multiplication
#

def mul_add_word(x, w, a):
    '''Return x * w + a for words w and a.'''
    z = []
    carry = a
    for xi in x:
        t = xi * w + carry
        z.append(t & WORD_MASK)
        carry = t >> WORD_BITS
    if carry:
        z.append(carry)
    return norm(z)


def mul_word(x, w):
    return mul_add_word(x, w, 0)


def _basic_mul(x, y):
    m = len(x)
    z = [0] * (m + len(y))
    for j, yj in enumerate(y):
        if not yj:
            continue
        carry = 0
        for i, xi in enumerate(x):
            t = z[i + j] + xi * yj + carry
            z[i + j] = t & WORD_MASK
            carry = t >> WORD_BITS
        z[j + m] = carry
    return norm(z)


def _shift_words(x, n):
    return [0] * n + x if x else []


def _karatsuba(x, y):
    # x = x1 * B**h + x0,  y = y1 * B**h + y0
    h = (max(len(x), len(y)) + 1) // 2
    x0, x1 = norm(x[:h]), x[h:]
    y0, y1 = norm(y[:h]), y[h:]
    z0 = mul(x0, y0)
    z2 = mul(x1, y1)
    # (x0 + x1)(y0 + y1) - z0 - z2 == x0 y1 + x1 y0
    z1 = sub(sub(mul(add(x0, x1), add(y0, y1)), z0), z2)
    return add(add(z0, _shift_words(z1, h)), _shift_words(z2, 2 * h))


def mul(x, y):
    if not x or not y:
        return []
    if min(len(x), len(y)) < KARATSUBA_THRESHOLD:
        return _basic_mul(x, y)
    return _karatsuba(x, y)


def sqr(x):
    return mul(x, x)


#
# Division
#

def divide_word(x, w):
    '''Return (q, r) with x = q * w + r for a non-zero word w.'''
    if not w:
        raise DivisionByZero('division by zero')
    q = [0] * len(x)
    r = 0
    for i in range(len(x) - 1, -1, -1):
        q[i], r = divmod((r << WORD_BITS) | x[i], w)
    return norm(q), r


def mod_word(x, w):
    return divide_word(x, w)[1]


def divide(u, v):
    '''Return (q, r) with u = q * v + r and r < v.

    Multi-word divisors use Knuth's Algorithm D (TAOCP vol. 2, 4.3.1).
    '''
    if not v:
        raise DivisionByZero('division by zero')
    if cmp(u, v) < 0:
        return [], list(u)
    if len(v) == 1:
        q, r = divide_word(u, v[0])
        return q, [r] if r else []

    # D1. Normalize so the divisor's top word has its msb set.
    s = WORD_BITS - v[-1].bit_length()
    vn = shl(v, s)
    un = shl(u, s)
    un += [0] * (len(u) + 1 - len(un))
    n = len(vn)
    m = len(un) - n - 1
    v_top, v_next = vn[-1], vn[-2]
    q = [0] * (m + 1)

    for j in range(m, -1, -1):
        # D3. Estimate the quotient digit and correct it to at most one too large.
        qhat, rhat = divmod((un[j + n] << WORD_BITS) | un[j + n - 1], v_top)
        while qhat > WORD_MASK or qhat * v_next > ((rhat << WORD_BITS) | un[j + n - 2]):
            qhat -= 1
            rhat += v_top
            if rhat > WORD_MASK:
                break

        # D4. Multiply and subtract.
        borrow = carry = 0
        for i in range(n):
            p = qhat * vn[i] + carry
            carry = p >> WORD_BITS
            t = un[i + j] - (p & WORD_MASK) - borrow
            un[i + j] = t & WORD_MASK
            borrow = 1 if t < 0 else 0
        t = un[j + n] - carry - borrow
        un[j + n] = t & WORD_MASK

        # D6. Add back if the estimate was one too large.
        if t < 0:
            qhat -= 1
            carry = 0
            for i in range(n):
                t = un[i + j] + vn[i] + carry
                un[i + j] = t & WORD_MASK
                carry = t >> WORD_BITS
            un[j + n] = (un[j + n] + carry) & WORD_MASK

        q[j] = qhat

    # D8. Unnormalize the remainder.
    return norm(q), shr(norm(un[:n]), s)


#
# Shifts and bits
#

def shl(x, s):
    if s < 0:
        raise PreconditionError('negative shift count')
    if not x:
        return []
    words, bits = divmod(s, WORD_BITS)
    if not bits:
        return [0] * words + list(x)
    z = [0] * words
    carry = 0
    for w in x:
        z.append(((w << bits) | carry) & WORD_MASK)
        carry = w >> (WORD_BITS - bits)
    if carry:
        z.append(carry)
    return z


def shr(x, s):
    if s < 0:
        raise PreconditionError('negative shift count')
    words, bits = divmod(s, WORD_BITS)
    if words >= len(x):
        return []
    if not bits:
        return x[words:]
    z = []
    last = len(x) - 1
    for i in range(words, len(x)):
        w = x[i] >> bits
        if i < last:
            w |= (x[i + 1] << (WORD_BITS - bits)) & WORD_MASK
        z.append(w)
    return norm(z)


def bit_len(x):
    if not x:
        return 0
    return (len(x) - 1) * WORD_BITS + x[-1].bit_length()


def trailing_zero_bits(x):
    for i, w in enumerate(x):
        if w:
            return i * WORD_BITS + (w & -w).bit_length() - 1
    return 0


def bit(x, i):
    if i < 0:
        raise PreconditionError('negative bit index')
    j = i // WORD_BITS
    if j >= len(x):
        return 0
    return (x[j] >> (i % WORD_BITS)) & 1


def sticky(x, i):
    '''Return 1 if any of the bits below bit i of x are set, otherwise 0.'''
    j = i // WORD_BITS
    for w in x[:min(j, len(x))]:
        if w:
            return 1
    if j < len(x) and x[j] & ((1 << (i % WORD_BITS)) - 1):
        return 1
    return 0


def set_bit(x, i, b):
    if i < 0:
        raise PreconditionError('negative bit index')
    j, mask = i // WORD_BITS, 1 << (i % WORD_BITS)
    if b:
        z = list(x) + [0] * (j + 1 - len(x))
        z[j] |= mask
        return z
    if j >= len(x):
        return list(x)
    z = list(x)
    z[j] &= ~mask
    return norm(z)


def and_(x, y):
    return norm([a & b for a, b in zip(x, y)])


def or_(x, y):
    if len(x) < len(y):
        x, y = y, x
    return [a | b for a, b in zip(x, y)] + x[len(y):]


def xor(x, y):
    if len(x) < len(y):
        x, y = y, x
    return norm([a ^ b for a, b in zip(x, y)] + x[len(y):])


def and_not(x, y):
    '''Return x & ~y.'''
    return norm([a & ~b & WORD_MASK for a, b in zip(x, y)] + x[len(y):])


#
# Powers and number theory
#

def exp(x, y, m=None):
    '''Return x**y, reduced modulo m if m is a non-empty vector.'''
    if m and len(m) == 1 and m[0] == 1:
        return []
    if not y:
        return [1]
    if m:
        x = divide(x, m)[1]
    if not x:
        return []
    if len(x) == 1 and x[0] == 1:
        return [1]

    # Left-to-right square-and-multiply
    z = list(x)
    for i in range(bit_len(y) - 2, -1, -1):
        z = sqr(z)
        if m:
            z = divide(z, m)[1]
        if bit(y, i):
            z = mul(z, x)
            if m:
                z = divide(z, m)[1]
    return z


def gcd(x, y):
    '''Euclid's algorithm.  gcd(x, 0) is x.'''
    while y:
        x, y = y, divide(x, y)[1]
    return list(x)


def mul_range(a, b):
    '''Return the product of all integers in [a, b] for 0 < a <= b.'''
    if a == b:
        return from_int(a)
    if a + 1 == b:
        return from_int(a * b)
    m = (a + b) // 2
    return mul(mul_range(a, m), mul_range(m + 1, b))


def random_below(rng, limit):
    '''Return a uniformly distributed vector in [0, limit) drawn from a random.Random.'''
    if not limit:
        raise PreconditionError('random limit must be positive')
    n = bit_len(limit)
    while True:
        z = from_int(rng.getrandbits(n))
        if cmp(z, limit) < 0:
            return z


def probably_prime(x, reps):
    '''Return True if x is probably prime, applying a Miller-Rabin test with a base of 2
    and reps pseudo-randomly chosen bases.  Never returns False for a prime.
    '''
    if not x:
        return False
    if len(x) == 1 and x[0] < 64:
        return bool((PRIME_BIT_MASK >> x[0]) & 1)
    if not x[0] & 1:
        return False

    r = mod_word(x, SMALL_PRIMES_PRODUCT)
    if any(r % p == 0 for p in SMALL_PRIMES):
        return False

    return _miller_rabin(x, reps + 1, True)


def _miller_rabin(n, reps, force2):
    n_minus_1 = sub(n, [1])
    k = trailing_zero_bits(n_minus_1)
    q = shr(n_minus_1, k)
    n_minus_3 = sub(n_minus_1, [2])
    rng = random.Random(n[0])

    for i in range(reps):
        if i == reps - 1 and force2:
            x = [2]
        else:
            x = add_word(random_below(rng, n_minus_3), 2)
        y = exp(x, q, n)
        if y == [1] or y == n_minus_1:
            continue
        for _ in range(1, k):
            y = divide(sqr(y), n)[1]
            if y == n_minus_1:
                break
            if y == [1]:
                return False
        else:
            return False
    return True


#
# Text and bytes
#

def _big_base(base):
    '''Return (bb, n): the largest power bb = base**n that fits in a word.'''
    bb, n = base, 1
    while bb * base <= WORD_MASK:
        bb *= base
        n += 1
    return bb, n


def itoa(x, base=10):
    '''Return the digits of x in base, lowercase, without prefix.'''
    if not 2 <= base <= MAX_BASE:
        raise PreconditionError(f'invalid base {base}')
    if not x:
        return '0'
    bb, n = _big_base(base)
    digits = []
    q = x
    while q:
        q, r = divide_word(q, bb)
        for _ in range(n):
            r, d = divmod(r, base)
            digits.append(DIGITS[d])
    while digits[-1] == '0':
        digits.pop()
    return ''.join(reversed(digits))


def digit_value(ch):
    '''Return the value of a digit character, or MAX_BASE + 1 if it is not one.'''
    if '0' <= ch <= '9':
        return ord(ch) - 48
    if 'a' <= ch <= 'z':
        return ord(ch) - 87
    if 'A' <= ch <= 'Z':
        return ord(ch) - 55
    return MAX_BASE + 1


PREFIX_BASES = {'b': 2, 'o': 8, 'x': 16}


def scan(text, pos, base, frac_ok):
    '''Scan an unsigned number from text starting at index pos.

    base 0 selects the base from a prefix: "0b", "0o" or "0x" (either case); a bare
    leading "0" selects octal unless frac_ok, otherwise the base is 10.  If frac_ok a
    single radix point may appear among the digits.

    Return (z, base, count, pos).  count is the number of digits scanned, or if a radix
    point was seen, minus the number of digits after it.  pos indexes the first character
    not consumed.  Raises ParseError if there are no digits.
    '''
    if base != 0 and not 2 <= base <= MAX_BASE:
        raise PreconditionError(f'invalid base {base}')

    n = len(text)
    b, count = base, 0
    if base == 0:
        b = 10
        if pos < n and text[pos] == '0':
            count = 1
            pos += 1
            prefix = text[pos].lower() if pos < n else ''
            if prefix in PREFIX_BASES:
                b = PREFIX_BASES[prefix]
                count = 0
                pos += 1
            elif not frac_ok:
                # The leading zero is a digit in its own right
                b = 8

    bb, nd = _big_base(b)
    z = []
    di = i = 0
    dp = -1
    while pos < n:
        ch = text[pos]
        if ch == '.' and frac_ok and dp < 0:
            dp = count
            pos += 1
            continue
        d = digit_value(ch)
        if d >= b:
            break
        count += 1
        di = di * b + d
        i += 1
        if i == nd:
            z = mul_add_word(z, bb, di)
            di = i = 0
        pos += 1

    if count == 0:
        raise ParseError(text, pos, b, 'number has no digits')
    if i:
        z = mul_add_word(z, b ** i, di)
    if dp >= 0:
        count = dp - count
    return z, b, count, pos


def from_bytes(buf):
    '''Interpret buf as a big-endian unsigned integer.'''
    z = []
    end = len(buf)
    while end > 0:
        start = max(end - 4, 0)
        w = 0
        for byte in buf[start:end]:
            w = (w << 8) | byte
        z.append(w)
        end = start
    return norm(z)


def to_bytes(x):
    '''Return the big-endian bytes of x without leading zero bytes.'''
    out = bytearray()
    for w in reversed(x):
        out += w.to_bytes(4, 'big')
    i = 0
    while i < len(out) and out[i] == 0:
        i += 1
    return bytes(out[i:])
