#
# Rounding modes, accuracy, status flags and the per-thread context
#
# (c) The bignum authors 2026.  All rights reserved.
#

import copy
import threading
from enum import IntEnum, IntFlag


__all__ = ('RoundingMode', 'Accuracy', 'Flags', 'Context', 'DefaultContext',
           'get_context', 'set_context', 'local_context',
           'TO_NEAREST_EVEN', 'TO_NEAREST_AWAY', 'TO_ZERO', 'AWAY_FROM_ZERO',
           'TO_NEGATIVE_INF', 'TO_POSITIVE_INF',
           'BELOW', 'EXACT', 'ABOVE')


class RoundingMode(IntEnum):
    TO_NEAREST_EVEN = 0     # To nearest with ties towards even
    TO_NEAREST_AWAY = 1     # To nearest with ties away from zero
    TO_ZERO = 2             # Truncate
    AWAY_FROM_ZERO = 3
    TO_NEGATIVE_INF = 4     # Floor
    TO_POSITIVE_INF = 5     # Ceiling

    def rounds_to_nearest(self):
        return self in (RoundingMode.TO_NEAREST_EVEN, RoundingMode.TO_NEAREST_AWAY)


# Direction of the rounding error of an operation: the result is below, equal to, or
# above the exact value.
class Accuracy(IntEnum):
    BELOW = -1
    EXACT = 0
    ABOVE = 1


# Sticky operation status flags of floating point operations.
class Flags(IntFlag):
    INVALID     = 0x01
    OVERFLOW    = 0x02
    UNDERFLOW   = 0x04
    INEXACT     = 0x08


TO_NEAREST_EVEN = RoundingMode.TO_NEAREST_EVEN
TO_NEAREST_AWAY = RoundingMode.TO_NEAREST_AWAY
TO_ZERO = RoundingMode.TO_ZERO
AWAY_FROM_ZERO = RoundingMode.AWAY_FROM_ZERO
TO_NEGATIVE_INF = RoundingMode.TO_NEGATIVE_INF
TO_POSITIVE_INF = RoundingMode.TO_POSITIVE_INF

BELOW = Accuracy.BELOW
EXACT = Accuracy.EXACT
ABOVE = Accuracy.ABOVE


class Context:
    '''The execution context for floating point operations.  Carries the rounding mode
    given to newly created floats, the precision used when parsing into a float of
    unset precision, and the status flags.'''

    __slots__ = ('rounding', 'parse_precision', 'flags')

    def __init__(self, *, rounding=TO_NEAREST_EVEN, parse_precision=64, flags=0):
        '''rounding is a RoundingMode.  parse_precision is a positive bit count.  flags
        represents the initially raised flags.
        '''
        if not isinstance(rounding, RoundingMode):
            raise TypeError('rounding must be a RoundingMode')
        if not isinstance(parse_precision, int) or parse_precision <= 0:
            raise ValueError('parse_precision must be a positive integer')
        self.rounding = rounding
        self.parse_precision = parse_precision
        self.flags = Flags(flags)

    def copy(self):
        '''Return a copy of the context.'''
        return copy.copy(self)

    def __repr__(self):
        return (f'<Context rounding={self.rounding.name} '
                f'parse_precision={self.parse_precision} flags={self.flags!r}>')


DefaultContext = Context()
tls = threading.local()


def get_context():
    '''Return the current thread's context, creating it from DefaultContext if needed.'''
    try:
        return tls.context
    except AttributeError:
        tls.context = DefaultContext.copy()
        return tls.context


def set_context(context):
    '''Sets the current thread's context to context (not a copy of it).'''
    if not isinstance(context, Context):
        raise TypeError('context must be a Context')
    tls.context = context


class LocalContext:
    '''A context manager that will set the current context for the active thread to a copy of
    context on entry to the with-statement and restore the previous context on exit.  If
    no context is specified a copy of the current context is taken instead.
    '''

    def __init__(self, context=None):
        self.saved_context = None
        self.context_to_set = context

    def __enter__(self):
        self.saved_context = get_context()
        context = (self.context_to_set or self.saved_context).copy()
        set_context(context)
        return context

    def __exit__(self, etype, value, traceback):
        set_context(self.saved_context)


local_context = LocalContext
