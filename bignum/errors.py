#
# Exceptions raised by the bignum package
#
# (c) The bignum authors 2026.  All rights reserved.
#

__all__ = ('PreconditionError', 'DivisionByZero', 'ParseError',
           'InvalidOperation', 'InvalidAdd', 'InvalidMultiply', 'InvalidDivide',
           'InvalidConversion')


#
# Precondition violations.  These are bugs in the caller.
#

class PreconditionError(ArithmeticError):
    '''Raised when an operation is called outside its documented domain, for example a
    negative shift count, an unsupported base, or an even modulus where an odd one is
    required.  Never raised for conditions a correct program can expect.
    '''


class DivisionByZero(PreconditionError, ZeroDivisionError):
    '''Integer, digit-vector or rational division by zero.'''


#
# Invalid operations - the NaN class of floating point failures
#

class InvalidOperation(ArithmeticError):
    '''Signalled when a floating point operation has no usefully defineable result.  There
    is no NaN value; the operation raises instead.

    InvalidOperation expects one argument, op_tuple: a tuple of the operation name and
    operands causing the signal.
    '''

    @property
    def op_tuple(self):
        return self.args[0]


class InvalidAdd(InvalidOperation):
    '''Addition of opposite-signed infinities, or subtraction of like-signed ones.'''


class InvalidMultiply(InvalidOperation):
    '''Multiplication of zero and infinity.'''


class InvalidDivide(InvalidOperation):
    '''0 / 0 or Inf / Inf.'''


class InvalidConversion(InvalidOperation):
    '''Conversion of a NaN.'''


#
# Parse errors.  Recoverable.
#

class ParseError(ValueError):
    '''Malformed numeric text.  offset is the index of the offending character in text,
    and base the base the digits were being read in (0 if not yet determined).
    '''

    def __init__(self, text, offset, base, reason):
        super().__init__(f'{reason} at offset {offset} of {text!r}')
        self.text = text
        self.offset = offset
        self.base = base
        self.reason = reason
