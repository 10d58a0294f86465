# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import NamedTuple


class Direction(IntEnum):
    ''' Head movement. The value is the run length of zeros used for it in a Gödel number. '''
    L = 1
    R = 2


class Transition(NamedTuple):
    from_state: int
    read: int
    to_state: int
    write: int
    direction: Direction


class Reason(Enum):
    EMPTY_INPUT = 'empty input'
    INVALID_DIGIT_FOR_BASE = 'invalid digit for base'
    NOT_A_GOEDEL_NUMBER = 'not a Gödel number'
    MISSING_INITIAL_TAPE = 'missing initial tape'
    NON_DETERMINISTIC = 'non-deterministic'
    MISSING_START_STATE = 'missing start state'
    MISSING_ACCEPT_STATE = 'missing accept state'
    INVALID_AUTOMATON = 'invalid automaton'
    UNKNOWN_SYMBOL = 'unknown symbol'
    UNSUPPORTED_DIRECTION = 'unsupported direction'
    UNENCODABLE_TAPE_SYMBOL = 'unencodable tape symbol'


@dataclass(frozen=True)
class Rejection:
    ''' Why some input was refused. Fallible operations return one of these instead of their result. '''
    reason: Reason
    message: str

    def __str__(self):
        return self.message


class AlreadyHalted(RuntimeError):
    pass


class UnencodableTapeSymbol(ValueError):
    pass


class TM:
    ''' A deterministic single-tape TM in canonical form: states are positive ints, symbols are 1-based indexes into the alphabet.
        By convention the machine starts in state 1 and accepts in state 2; symbols 1, 2, 3 are "0", "1" and the blank. '''
    START_STATE = 1
    ACCEPT_STATE = 2
    BLANK_SYMBOL = 3
    BLANK_LABEL = '⌴'

    __slots__ = ('states', 'alphabet', 'blank', 'transitions', 'initial_tape', 'goedel', '_table')

    def __init__(self, transitions, alphabet=('0', '1', BLANK_LABEL), initial_tape=(), blank=BLANK_SYMBOL, goedel=None):
        self.transitions = tuple(Transition(f, r, t, w, Direction(d)) for f, r, t, w, d in transitions)
        self.alphabet, self.initial_tape, self.blank, self.goedel = tuple(alphabet), tuple(initial_tape), blank, goedel
        self.states = tuple(sorted({self.START_STATE, self.ACCEPT_STATE}.union(*((tr.from_state, tr.to_state) for tr in self.transitions))))
        self._table = {}
        for tr in self.transitions:
            self._table.setdefault((tr.from_state, tr.read), tr)

    @property
    def goedel_without_tape(self):
        """ The Gödel number this TM came from, minus the initial tape. (None if it did not come from one.) """
        from goedel import body
        return None if self.goedel is None else body(self.goedel)

    @property
    def starting_state(self):
        return self.START_STATE

    @property
    def accepting_state(self):
        return self.ACCEPT_STATE

    def is_deterministic(self):
        return len(self._table) == len(self.transitions)

    def transition(self, from_state, read_symbol):
        """ Return the Transition for this state and symbol, or None if the machine halts there. """
        return self._table.get((from_state, read_symbol))

    def label(self, symbol):
        return self.alphabet[symbol-1]

    def symbol(self, label):
        return self.alphabet.index(label) + 1

    def __str__(self):
        return '_'.join(f'q{f}:{self.label(r)}>q{t}:{self.label(w)}{d.name}' for f, r, t, w, d in self.transitions)

    def __repr__(self):
        return f'TM({str(self)!r}, tape={"".join(map(self.label, self.initial_tape))!r})'

    def __eq__(self, other):
        if not isinstance(other, TM):
            return NotImplemented
        return (self.transitions, self.alphabet, self.blank, self.initial_tape) == (other.transitions, other.alphabet, other.blank, other.initial_tape)

    def __hash__(self):
        return hash((self.transitions, self.alphabet, self.blank, self.initial_tape))

    def table(self):
        ''' Return the transition table as text: a row per state, a column per symbol, "---" where the machine halts. '''
        from tabulate import tabulate
        headers = ['q'] + list(self.alphabet)
        rows = []
        for q in self.states:
            row = [f'q{q}' + ('*' if q == self.ACCEPT_STATE else '')]
            for s in range(1, len(self.alphabet)+1):
                tr = self.transition(q, s)
                row.append('---' if tr is None else f'{self.label(tr.write)}{tr.direction.name}q{tr.to_state}')
            rows.append(row)
        return tabulate(rows, headers=headers)
