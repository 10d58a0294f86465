# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
''' Bring a FLACI automaton into the canonical form that Gödel numbers describe:
    one accepting state, states numbered start=1, accept=2, others 3..., and the alphabet ordered "0", "1", blank, others. '''
from copy import deepcopy
import logging

from flaci import Edge, Label, Role, State
from utm_tm import TM, Direction, Reason, Rejection
import goedel

log = logging.getLogger(__name__)


def single_accept(automaton):
    ''' Return an equivalent automaton with one accepting state (a new sink), if needed.
        Each old accepting state gets sink transitions (writing back what was read, moving right) for every symbol it had no rule for.
        This is also needed when the only accepting state is the starting state: canonical numbering has to tell them apart. '''
    accepting = [q for q in automaton.states if q.accept]
    if len(accepting) < 2 and not (accepting and accepting[0].start):
        return automaton
    automaton = deepcopy(automaton)
    sink_id = max(q.id for q in automaton.states) + 1
    for q in automaton.states:
        if not q.accept:
            continue
        used = {label.read for e in q.transitions for label in e.labels}
        unused = [s for s in automaton.stack_alphabet if s not in used]
        if unused:
            q.transitions.append(Edge(q.id, sink_id, [Label(s, s, 'R') for s in unused]))
        q.role &= ~Role.ACCEPT
    automaton.states.append(State(sink_id, f'q{sink_id}', Role.ACCEPT))
    log.debug('Merged %d accepting states into q%d', len(accepting), sink_id)
    return automaton


def canonical_ids(automaton):
    ''' Map state IDs: the starting state to 1, the accepting state to 2, the rest (in order) to 3, 4, .... '''
    start = next(q.id for q in automaton.states if q.start)
    accept = next(q.id for q in automaton.states if q.accept)
    ids = {start: TM.START_STATE, accept: TM.ACCEPT_STATE}
    for q in automaton.states:
        if q.id not in ids:
            ids[q.id] = len(ids) + 1
    return ids


def renumber(automaton, ids):
    ''' Return a copy with state IDs (and state names) replaced according to ids. '''
    automaton = deepcopy(automaton)
    for q in automaton.states:
        q.id = ids[q.id]
        q.name = f'q{q.id}'
        for e in q.transitions:
            e.source, e.target = ids[e.source], ids[e.target]
    return automaton


def canonical_alphabet(stack_alphabet):
    ''' Return the symbol labels in Gödel-number order: "0", "1", the blank (first in stack_alphabet), then the others. '''
    labels = ['0', '1', stack_alphabet[0]]
    for s in stack_alphabet:
        if s not in labels:
            labels.append(s)
    return tuple(labels)


def check(automaton):
    ''' Return a Rejection for an automaton that cannot be canonicalized, else None. '''
    starts = [q for q in automaton.states if q.start]
    if not starts:
        return Rejection(Reason.MISSING_START_STATE, 'No starting state found')
    if len(starts) > 1:
        return Rejection(Reason.MISSING_START_STATE, 'More than one starting state found')
    if not any(q.accept for q in automaton.states):
        return Rejection(Reason.MISSING_ACCEPT_STATE, 'No accepting state found')
    if automaton.blank in ('0', '1'):
        return Rejection(Reason.INVALID_AUTOMATON, f'The empty symbol may not be {automaton.blank!r}')
    ids = [q.id for q in automaton.states]
    if len(set(ids)) != len(ids):
        return Rejection(Reason.INVALID_AUTOMATON, 'State IDs are not unique')
    for q in automaton.states:
        for e in q.transitions:
            if e.source != q.id:
                return Rejection(Reason.INVALID_AUTOMATON, f'Transition listed under state {q.id} starts at state {e.source}')
            if e.target not in ids:
                return Rejection(Reason.INVALID_AUTOMATON, f'Transition from state {q.id} leads to unknown state {e.target}')
    return None


def canonicalize(automaton):
    ''' Return the canonical form of a FLACI automaton (see module docstring), or a Rejection. Canonical automata are left as they are. '''
    if (rejection := check(automaton)) is not None:
        return rejection
    automaton = single_accept(automaton)
    automaton = renumber(automaton, canonical_ids(automaton))
    labels = canonical_alphabet(automaton.stack_alphabet)
    automaton.stack_alphabet = [labels[2], *(s for s in labels[:2] if s in automaton.stack_alphabet), *labels[3:]]
    return automaton


def to_definition(automaton):
    ''' Return the TM described by a FLACI automaton (canonicalized first), or a Rejection. '''
    automaton = canonicalize(automaton)
    if isinstance(automaton, Rejection):
        return automaton
    alphabet = canonical_alphabet(automaton.stack_alphabet)
    symbol = {label: i for i, label in enumerate(alphabet, 1)}
    transitions, seen = [], set()
    for q in automaton.states:
        for e in q.transitions:
            for label in e.labels:
                if label.read not in symbol or label.write not in symbol:
                    return Rejection(Reason.UNKNOWN_SYMBOL, f'Transition q{e.source}->q{e.target} uses a symbol missing from the alphabet: {label.to_json()}')
                if label.direction not in Direction.__members__:
                    return Rejection(Reason.UNSUPPORTED_DIRECTION, f'Transition q{e.source}->q{e.target} does not move the head ({label.direction}); only L and R can be encoded')
                r = symbol[label.read]
                if (e.source, r) in seen:
                    return goedel.NON_DETERMINISTIC
                seen.add((e.source, r))
                transitions.append((e.source, r, e.target, symbol[label.write], Direction[label.direction]))
    unknown = [s for s in automaton.simulation_input if s not in symbol]
    if unknown:
        return Rejection(Reason.UNKNOWN_SYMBOL, f'Initial tape uses a symbol missing from the alphabet: {unknown[0]!r}')
    return TM(transitions, alphabet, [symbol[s] for s in automaton.simulation_input], TM.BLANK_SYMBOL)


def encode_automaton(automaton, with_tape=True):
    ''' Return the Gödel number of a FLACI automaton, or a Rejection. The initial tape may only hold "0" and "1". '''
    tm = to_definition(automaton)
    if isinstance(tm, Rejection):
        return tm
    if with_tape and any(s not in (1, 2) for s in tm.initial_tape):
        return Rejection(Reason.UNENCODABLE_TAPE_SYMBOL, 'The initial tape may only contain the symbols 0 and 1')
    return goedel.encode(tm, with_tape)
