#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
''' Gödel numbers of TMs.
    In binary, a number reads 1 T 11 T 11 ... 11 T 111 tape, where each transition T is 0^f 1 0^r 1 0^t 1 0^w 1 0^d:
    from-state f, read symbol r, to-state t, written symbol w and direction d (one zero for L, two for R), all in unary.
    The tape is a bit string; bit b is symbol b+1. '''
from contextlib import contextmanager
from functools import cache
import logging
import re
import sys

from utm_tm import TM, Direction, Reason, Rejection, UnencodableTapeSymbol

BASES = (2, 10, 16)
DIGITS = {
    2: ('[01]+', 'Input should only contain 0s and 1s'),
    10: ('[0-9]+', 'Input should only contain digits 0-9'),
    16: ('[0-9a-f]+', 'Input should only contain digits 0-9 and letters a-f'),
}

# Fields are one or more zeros, except directions, which are one or two.
_TRANSITION = '00*100*100*100*1(0|00)'
BODY_REGEX = f'1({_TRANSITION}11)*{_TRANSITION}'
FULL_REGEX = f'{BODY_REGEX}111(0|1)*'

NOT_A_GOEDEL_NUMBER = Rejection(Reason.NOT_A_GOEDEL_NUMBER, 'Input is not a valid Gödel number')
MISSING_INITIAL_TAPE = Rejection(Reason.MISSING_INITIAL_TAPE, 'Initial tape is missing. Add it after the delimiter 111')
NON_DETERMINISTIC = Rejection(Reason.NON_DETERMINISTIC, 'Turing Machine is non-deterministic')

log = logging.getLogger(__name__)


@contextmanager
def _unlimited_digits():
    ''' Lift the interpreter's cap on decimal int/str conversions, where it has one. Gödel numbers get long. '''
    limit = getattr(sys, 'get_int_max_str_digits', None)
    if limit is None:
        yield
        return
    old = limit()
    sys.set_int_max_str_digits(0)
    try:
        yield
    finally:
        sys.set_int_max_str_digits(old)


def parse_number(text, base):
    ''' Parse untrusted digits in the given base. Return an int, or a Rejection if the text is empty or has a digit outside the base. '''
    if base not in DIGITS:
        raise ValueError(f'Unsupported base: {base!r}')
    if not text:
        return Rejection(Reason.EMPTY_INPUT, 'Please enter a number')
    pattern, message = DIGITS[base]
    if not re.fullmatch(pattern, text.lower()):
        return Rejection(Reason.INVALID_DIGIT_FOR_BASE, message)
    with _unlimited_digits():
        return int(text, base)


def format_number(n, base):
    if base not in DIGITS:
        raise ValueError(f'Unsupported base: {base!r}')
    with _unlimited_digits():
        return format(n, {2: 'b', 10: 'd', 16: 'x'}[base])


@cache
def grammar(with_tape=True):
    ''' Return a minimal DFA over {0,1} recognizing binary Gödel numbers (with or without the "111 tape" suffix). Requires automata-lib. '''
    from automata.fa import dfa, nfa
    recognizer = nfa.NFA.from_regex(FULL_REGEX if with_tape else BODY_REGEX, input_symbols={'0', '1'})
    return dfa.DFA.from_nfa(recognizer).minify()


def validate(n):
    ''' Return None if n is a syntactically valid Gödel number (tape included), otherwise a Rejection saying which way it fails. '''
    bits = format(n, 'b')
    if grammar(True).accepts_input(bits):
        return None
    if grammar(False).accepts_input(bits):
        return MISSING_INITIAL_TAPE
    return NOT_A_GOEDEL_NUMBER


def split(n):
    ''' Split a valid Gödel number's bits (after the leading 1) into the transition part and the tape part. '''
    bits = format(n, 'b')[1:]
    delimiter = bits.find('111')
    if delimiter < 0:
        raise ValueError(f'Not a Gödel number with initial tape: 0x{n:x}')
    return bits[:delimiter], bits[delimiter+3:]


def body(n):
    ''' Return the Gödel number of the same TM with the initial tape (and its 111 delimiter) left out. '''
    return int('1' + split(n)[0], 2)


def alphabet_labels(max_symbol):
    ''' Labels for symbols 1..max_symbol (at least 3): "0", "1", the blank, then lowercase letters. '''
    labels = ['0', '1', TM.BLANK_LABEL]
    for i in range(4, max_symbol+1):
        labels.append(chr(ord('a') + i - 3))
    return labels


def decode(n):
    ''' Turn a grammatically valid Gödel number into a TM. Return a Rejection if two transitions share a (state, symbol) pair. '''
    transitions_bits, tape_bits = split(n)
    transitions, seen = [], set()
    max_symbol = TM.BLANK_SYMBOL
    for group in transitions_bits.split('11'):
        f, r, t, w, d = map(len, group.split('1'))
        if (f, r) in seen:
            return NON_DETERMINISTIC
        seen.add((f, r))
        transitions.append((f, r, t, w, Direction.L if d == 1 else Direction.R))
        max_symbol = max(max_symbol, r, w)
    tape = [int(b) + 1 for b in tape_bits]
    return TM(transitions, alphabet_labels(max_symbol), tape, TM.BLANK_SYMBOL, goedel=n)


def parse(text, base=2):
    ''' Parse untrusted text all the way to a TM. Return the TM or the first Rejection met (digits, then grammar, then determinism). '''
    n = parse_number(text, base)
    if isinstance(n, Rejection):
        log.debug('Rejected %r (base %d): %s', text, base, n)
        return n
    if (rejection := validate(n)) is not None:
        log.debug('Rejected 0x%x: %s', n, rejection)
        return rejection
    tm = decode(n)
    if isinstance(tm, Rejection):
        log.debug('Rejected 0x%x: %s', n, tm)
    return tm


def encode(tm, with_tape=True):
    ''' Return the Gödel number of a canonical TM. Only symbols 1 and 2 ("0" and "1") can be written to the tape part. '''
    zeros = '0'.__mul__
    groups = ('1'.join(map(zeros, (f, r, t, w, int(d)))) for f, r, t, w, d in tm.transitions)
    bits = '1' + '11'.join(groups)
    if with_tape:
        if (bad := [s for s in tm.initial_tape if s not in (1, 2)]):
            raise UnencodableTapeSymbol(f'Initial tape symbol {tm.label(bad[0])!r} has no binary encoding')
        bits += '111' + ''.join(str(s-1) for s in tm.initial_tape)
    return int(bits, 2)


if __name__ == '__main__':
    from utm_args import ArgumentParser, setup_logging, tm_args
    ap = ArgumentParser(description='Decode Gödel numbers: show the transition table and the number in every base.', parents=[tm_args()])
    ap.add_argument('-t', '--table', help='Print the transition table', action='store_true')
    args = ap.parse_args()
    setup_logging(args.verbose)

    for tm in args.machines:
        print(tm)
        if args.table:
            print(tm.table())
        for with_tape in True, False:
            try:
                n = encode(tm, with_tape)
            except UnencodableTapeSymbol as e:
                print(e)
                continue
            print('with tape:   ' if with_tape else 'without tape:', *(f'{b:>2}: {format_number(n, b)}' for b in BASES), sep='\n  ')
