# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
import pytest

import canonical
import goedel
from flaci import Automaton, Edge, Flaci, Label, Role, State, from_definition
from machines import SIMPLE, SQUARE_0111
from utm import run
from utm_tm import TM, Direction, Reason, Rejection

L, R = Direction.L, Direction.R
BLANK = '□'


def two_accepting_states(tape=()):
    ''' Accepts 0..., and 1...1, rejects 1...10...; states are A=5 (start), B=7 and C=9 (accepting), D=11. '''
    states = [
        State(5, 'A', Role.START, [Edge(5, 7, [Label('0', '0', 'R')]), Edge(5, 9, [Label('1', '1', 'R')])]),
        State(7, 'B', Role.ACCEPT),
        State(9, 'C', Role.ACCEPT, [Edge(9, 9, [Label('1', '1', 'R')]), Edge(9, 11, [Label('0', '0', 'R')])]),
        State(11, 'D'),
    ]
    return Automaton([BLANK, '0', '1'], states, simulation_input=list(tape))


def accepts(tm, tape):
    config = run(TM(tm.transitions, tm.alphabet, [tm.symbol(s) for s in tape], tm.blank), 1000)
    assert config.finished
    return config.accepted


def test_single_accept_adds_sink():
    automaton = canonical.single_accept(two_accepting_states())
    sink = automaton.states[-1]
    assert (sink.id, sink.name, sink.role, sink.transitions) == (12, 'q12', Role.ACCEPT, [])
    assert [q.accept for q in automaton.states] == [False, False, False, False, True]
    b, c = automaton.state(7), automaton.state(9)
    assert b.transitions == [Edge(7, 12, [Label(BLANK, BLANK, 'R'), Label('0', '0', 'R'), Label('1', '1', 'R')])]
    assert c.transitions[-1] == Edge(9, 12, [Label(BLANK, BLANK, 'R')])
    # The input is not modified.
    assert two_accepting_states().state(7).accept


def test_single_accept_leaves_one_accepting_state_alone():
    automaton = two_accepting_states()
    automaton.state(9).role = Role.NONE
    assert canonical.single_accept(automaton) is automaton


def test_single_accept_skips_fully_defined_states():
    automaton = two_accepting_states()
    automaton.state(9).transitions.append(Edge(9, 5, [Label(BLANK, '1', 'L')]))
    reduced = canonical.single_accept(automaton)
    assert all(e.target != 12 for e in reduced.state(9).transitions)
    assert not reduced.state(9).accept


def test_canonical_ids():
    reduced = canonical.single_accept(two_accepting_states())
    assert canonical.canonical_ids(reduced) == {5: 1, 12: 2, 7: 3, 9: 4, 11: 5}


def test_canonical_alphabet():
    assert canonical.canonical_alphabet([BLANK, '0', '1']) == ('0', '1', BLANK)
    assert canonical.canonical_alphabet(['_', 'x', '1', 'y', 'x']) == ('0', '1', '_', 'x', 'y')


def test_canonicalize():
    automaton = canonical.canonicalize(two_accepting_states())
    assert [(q.id, q.name, q.role) for q in automaton.states] == [
        (1, 'q1', Role.START), (3, 'q3', Role.NONE), (4, 'q4', Role.NONE), (5, 'q5', Role.NONE), (2, 'q2', Role.ACCEPT)]
    assert automaton.stack_alphabet == [BLANK, '0', '1']
    assert automaton.state(4).transitions == [Edge(4, 4, [Label('1', '1', 'R')]), Edge(4, 5, [Label('0', '0', 'R')]), Edge(4, 2, [Label(BLANK, BLANK, 'R')])]


def test_canonicalize_is_idempotent():
    once = canonical.canonicalize(two_accepting_states('10'))
    assert canonical.canonicalize(once) == once
    assert canonical.to_definition(once) == canonical.to_definition(two_accepting_states('10'))


def test_to_definition():
    tm = canonical.to_definition(two_accepting_states('011'))
    assert tm.transitions == (
        (1, 1, 3, 1, R), (1, 2, 4, 2, R),
        (3, 3, 2, 3, R), (3, 1, 2, 1, R), (3, 2, 2, 2, R),
        (4, 2, 4, 2, R), (4, 1, 5, 1, R), (4, 3, 2, 3, R),
    )
    assert tm.alphabet == ('0', '1', BLANK)
    assert tm.initial_tape == (1, 2, 2)
    assert tm.states == (1, 2, 3, 4, 5)


@pytest.mark.parametrize('tape, accepted', [('', False), ('0', True), ('01', True), ('1', True), ('111', True), ('110', False), ('10', False)])
def test_single_accept_preserves_acceptance(tape, accepted):
    ''' The unreduced automaton accepts exactly when it halts in B or C: on empty input it halts in A. '''
    tm = canonical.to_definition(two_accepting_states())
    assert accepts(tm, tape) == accepted


def test_encode_round_trip_preserves_behaviour():
    automaton = two_accepting_states('1101')
    n = canonical.encode_automaton(automaton)
    decoded = goedel.parse(goedel.format_number(n, 16), 16)
    assert not isinstance(decoded, Rejection)
    tm = canonical.to_definition(automaton)
    assert decoded.transitions == tm.transitions
    assert decoded.initial_tape == tm.initial_tape
    a, b = run(decoded, 1000), run(tm, 1000)
    assert (a.accepted, a.steps, a.state) == (b.accepted, b.steps, b.state)
    assert canonical.encode_automaton(automaton, with_tape=False) == goedel.body(n)


def test_start_state_that_accepts():
    automaton = Automaton([BLANK, '0', '1'], [State(0, 'only', Role.START | Role.ACCEPT)])
    tm = canonical.to_definition(automaton)
    assert tm.transitions == ((1, 3, 2, 3, R), (1, 1, 2, 1, R), (1, 2, 2, 2, R))
    assert accepts(tm, '') and accepts(tm, '0') and accepts(tm, '1')


@pytest.mark.parametrize('bits', [SIMPLE, SQUARE_0111])
def test_definition_round_trip(bits):
    tm = goedel.parse(bits, 2)
    back = canonical.to_definition(from_definition(tm).automaton)
    assert set(back.transitions) == set(tm.transitions)
    assert back.initial_tape == tm.initial_tape
    assert back.alphabet == tm.alphabet
    assert (run(back, 1000).steps, run(back, 1000).accepted) == (run(tm, 1000).steps, run(tm, 1000).accepted)


def test_definition_round_trip_keeps_number():
    n = int(SIMPLE, 2)
    assert canonical.encode_automaton(from_definition(goedel.decode(n)).automaton) == n


def test_missing_start_state():
    automaton = two_accepting_states()
    automaton.state(5).role = Role.NONE
    assert canonical.canonicalize(automaton) == Rejection(Reason.MISSING_START_STATE, 'No starting state found')
    automaton.state(5).role = automaton.state(11).role = Role.START
    assert canonical.to_definition(automaton) == Rejection(Reason.MISSING_START_STATE, 'More than one starting state found')


def test_missing_accept_state():
    automaton = two_accepting_states()
    automaton.state(7).role = automaton.state(9).role = Role.NONE
    assert canonical.encode_automaton(automaton) == Rejection(Reason.MISSING_ACCEPT_STATE, 'No accepting state found')


def test_blank_may_not_be_a_bit():
    automaton = two_accepting_states()
    automaton.stack_alphabet = ['0', '1']
    assert canonical.canonicalize(automaton).reason is Reason.INVALID_AUTOMATON


def test_unknown_target_state():
    automaton = two_accepting_states()
    automaton.state(11).transitions.append(Edge(11, 99, [Label('0', '0', 'L')]))
    assert canonical.canonicalize(automaton).reason is Reason.INVALID_AUTOMATON


def test_unknown_symbol():
    automaton = two_accepting_states()
    automaton.state(11).transitions.append(Edge(11, 5, [Label('x', '0', 'L')]))
    assert canonical.to_definition(automaton).reason is Reason.UNKNOWN_SYMBOL
    assert canonical.to_definition(two_accepting_states('0x')).reason is Reason.UNKNOWN_SYMBOL


def test_no_move_cannot_be_encoded():
    automaton = two_accepting_states()
    automaton.state(11).transitions.append(Edge(11, 5, [Label('0', '0', 'N')]))
    assert canonical.encode_automaton(automaton).reason is Reason.UNSUPPORTED_DIRECTION


def test_non_deterministic_automaton():
    automaton = two_accepting_states()
    automaton.state(5).transitions.append(Edge(5, 11, [Label('0', '1', 'L')]))
    assert canonical.to_definition(automaton).reason is Reason.NON_DETERMINISTIC


def test_unencodable_tape_symbol():
    automaton = two_accepting_states(['1', BLANK, '0'])
    tm = canonical.to_definition(automaton)
    assert tm.initial_tape == (2, 3, 1)
    assert canonical.encode_automaton(automaton).reason is Reason.UNENCODABLE_TAPE_SYMBOL
    assert isinstance(canonical.encode_automaton(automaton, with_tape=False), int)


def test_extra_symbols_follow_the_blank():
    automaton = two_accepting_states()
    automaton.stack_alphabet = ['_', 'x', '1', '0']
    automaton.state(11).transitions.append(Edge(11, 5, [Label('x', '_', 'L')]))
    tm = canonical.to_definition(automaton)
    assert tm.alphabet == ('0', '1', '_', 'x')
    assert (5, 4, 1, 3, L) in tm.transitions
    decoded = goedel.decode(goedel.encode(tm))
    assert decoded.transitions == tm.transitions
    assert decoded.alphabet == ('0', '1', TM.BLANK_LABEL, 'b')


def test_flaci_document_round_trip():
    flaci = Flaci(two_accepting_states('01'), 'two', 'accepting states')
    again = Flaci.from_json(flaci.to_json())
    assert again == flaci
    assert canonical.encode_automaton(again.automaton) == canonical.encode_automaton(flaci.automaton)


def test_canonicalize_keeps_bits_out_of_alphabets_without_them():
    automaton = Automaton(['_', 'x'], [State(4, 'mark', Role.START, [Edge(4, 6, [Label('_', 'x', 'L')])]), State(6, 'done', Role.ACCEPT)])
    assert canonical.canonicalize(automaton).stack_alphabet == ['_', 'x']
    tm = canonical.to_definition(automaton)
    assert tm.alphabet == ('0', '1', '_', 'x')
    assert tm.transitions == ((1, 3, 2, 4, L),)
    partial = Automaton(['_', 'y', '1'], automaton.states)
    assert canonical.canonicalize(partial).stack_alphabet == ['_', '1', 'y']
