#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
''' The FLACI JSON interchange format for TMs, as drawn in a state diagram editor.
    Geometry (x, y, radius) belongs to the diagram and is carried along untouched. '''
from dataclasses import dataclass, field
from enum import Flag
import json

from utm_tm import Direction, Reason, Rejection

DIRECTIONS = ('L', 'R', 'N')
RADIUS = 30


class Role(Flag):
    NONE = 0
    START = 1
    ACCEPT = 2


def _expect(cond, message):
    if not cond:
        raise ValueError(message)


def _int_id(obj, key, where):
    value = obj.get(key)
    _expect(isinstance(value, int) and not isinstance(value, bool) and value >= 0, f'{where}: {key} must be a non-negative integer, not {value!r}')
    return value


def _number(obj, key, where):
    value = obj.get(key, 0)
    _expect(isinstance(value, (int, float)) and not isinstance(value, bool), f'{where}: {key} must be a number, not {value!r}')
    return value


def _strings(obj, key, where):
    value = obj.get(key, [])
    _expect(isinstance(value, list) and all(isinstance(s, str) for s in value), f'{where}: {key} must be a list of strings')
    return list(value)


@dataclass
class Label:
    read: str
    write: str
    direction: str

    @classmethod
    def from_json(cls, obj, where='label'):
        _expect(isinstance(obj, list) and len(obj) == 3 and all(isinstance(s, str) for s in obj), f'{where}: expected [read, write, direction], not {obj!r}')
        _expect(obj[2] in DIRECTIONS, f'{where}: direction must be one of {"/".join(DIRECTIONS)}, not {obj[2]!r}')
        return cls(*obj)

    def to_json(self):
        return [self.read, self.write, self.direction]


@dataclass
class Edge:
    ''' All transitions from one state to another, one Label per symbol read. '''
    source: int
    target: int
    labels: list = field(default_factory=list)
    x: float = 0
    y: float = 0

    @classmethod
    def from_json(cls, obj, where='transition'):
        _expect(isinstance(obj, dict), f'{where}: expected an object')
        labels = obj.get('Labels')
        _expect(isinstance(labels, list), f'{where}: Labels must be a list')
        return cls(_int_id(obj, 'Source', where), _int_id(obj, 'Target', where),
                   [Label.from_json(label, f'{where}, label {i}') for i, label in enumerate(labels)],
                   _number(obj, 'x', where), _number(obj, 'y', where))

    def to_json(self):
        return dict(Source=self.source, Target=self.target, x=self.x, y=self.y, Labels=[label.to_json() for label in self.labels])


@dataclass
class State:
    id: int
    name: str
    role: Role = Role.NONE
    transitions: list = field(default_factory=list)
    x: float = 0
    y: float = 0
    radius: float = RADIUS

    @property
    def start(self):
        return Role.START in self.role

    @property
    def accept(self):
        return Role.ACCEPT in self.role

    @classmethod
    def from_json(cls, obj, where='state'):
        _expect(isinstance(obj, dict), f'{where}: expected an object')
        state_id = _int_id(obj, 'ID', where)
        where = f'state {state_id}'
        name = obj.get('Name', f'q{state_id}')
        _expect(isinstance(name, str), f'{where}: Name must be a string')
        for flag in 'Start', 'Final':
            _expect(isinstance(obj.get(flag, False), bool), f'{where}: {flag} must be a boolean')
        role = (Role.START if obj.get('Start') else Role.NONE) | (Role.ACCEPT if obj.get('Final') else Role.NONE)
        edges = obj.get('Transitions', [])
        _expect(isinstance(edges, list), f'{where}: Transitions must be a list')
        return cls(state_id, name, role, [Edge.from_json(e, f'{where}, transition {i}') for i, e in enumerate(edges)],
                   _number(obj, 'x', where), _number(obj, 'y', where), _number(obj, 'Radius', where) or RADIUS)

    def to_json(self):
        return dict(ID=self.id, Name=self.name, x=self.x, y=self.y, Final=self.accept, Start=self.start, Radius=self.radius,
                    Transitions=[e.to_json() for e in self.transitions])


@dataclass
class Automaton:
    ''' A TM over stack_alphabet, whose first entry is the blank symbol. (alphabet is the input alphabet, used only by the editor.) '''
    stack_alphabet: list
    states: list
    alphabet: list = field(default_factory=lambda: ['0', '1'])
    simulation_input: list = field(default_factory=list)
    accept_cache: list = field(default_factory=list)
    last_inputs: list = field(default_factory=list)

    @property
    def blank(self):
        return self.stack_alphabet[0]

    def state(self, state_id):
        return next((q for q in self.states if q.id == state_id), None)

    @classmethod
    def from_json(cls, obj):
        _expect(isinstance(obj, dict), 'automaton: expected an object')
        stack_alphabet = _strings(obj, 'StackAlphabet', 'automaton')
        _expect(stack_alphabet, 'automaton: StackAlphabet must not be empty')
        states = obj.get('States')
        _expect(isinstance(states, list), 'automaton: States must be a list')
        simulation_input = _strings(obj, 'simulationInput', 'automaton')
        _expect(all(simulation_input), 'automaton: simulationInput entries must not be empty')
        last_inputs = obj.get('lastInputs', [])
        _expect(isinstance(last_inputs, list) and all(isinstance(l, list) for l in last_inputs), 'automaton: lastInputs must be a list of lists')
        accept_cache = obj.get('acceptCache', [])
        _expect(isinstance(accept_cache, list), 'automaton: acceptCache must be a list')
        return cls(stack_alphabet, [State.from_json(q, f'state {i}') for i, q in enumerate(states)],
                   _strings(obj, 'Alphabet', 'automaton'), simulation_input, accept_cache, last_inputs)

    def to_json(self):
        return dict(Alphabet=self.alphabet, StackAlphabet=self.stack_alphabet, States=[q.to_json() for q in self.states],
                    acceptCache=self.accept_cache, simulationInput=self.simulation_input, lastInputs=self.last_inputs)


@dataclass
class Flaci:
    automaton: Automaton
    name: str = ''
    description: str = ''

    @classmethod
    def from_json(cls, obj):
        ''' Check the structure of parsed JSON and build a Flaci from it. Raise ValueError, naming the offending part, if it does not conform. '''
        _expect(isinstance(obj, dict), 'Expected a JSON object')
        _expect(obj.get('type') == 'TM', f'Expected a FLACI TM (type "TM"), not type {obj.get("type")!r}')
        for key in 'name', 'description':
            _expect(isinstance(obj.get(key, ''), str), f'{key} must be a string')
        return cls(Automaton.from_json(obj.get('automaton')), obj.get('name', ''), obj.get('description', ''))

    def to_json(self):
        return dict(name=self.name, description=self.description, type='TM', automaton=self.automaton.to_json())

    def save(self, path):
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(), f, ensure_ascii=False, indent=2)


def load(path):
    ''' Read a FLACI file. Return a Flaci, or a Rejection if the file is unreadable, not JSON or not a FLACI TM. '''
    try:
        with open(path, encoding='utf-8') as f:
            obj = json.load(f)
    except OSError as e:
        return Rejection(Reason.INVALID_AUTOMATON, f'{path}: cannot read ({e.strerror or e})')
    except json.JSONDecodeError as e:
        return Rejection(Reason.INVALID_AUTOMATON, f'{path}: not JSON ({e})')
    try:
        return Flaci.from_json(obj)
    except ValueError as e:
        return Rejection(Reason.INVALID_AUTOMATON, f'{path}: {e}')


def from_definition(tm, goedel=None):
    ''' Return the FLACI form of a TM: one diagram state per TM state, with synthetic positions the editor may move. '''
    blank = tm.label(tm.blank)
    stack_alphabet = [blank] + [s for s in tm.alphabet if s != blank]
    states = []
    for q in tm.states:
        x, y = 100 * q, 100
        edges = {}
        for f, r, t, w, d in tm.transitions:
            if f == q:
                edges.setdefault(t, Edge(q, t, x=x, y=y)).labels.append(Label(tm.label(r), tm.label(w), Direction(d).name))
        role = (Role.START if q == tm.START_STATE else Role.NONE) | (Role.ACCEPT if q == tm.ACCEPT_STATE else Role.NONE)
        states.append(State(q, f'q{q}', role, list(edges.values()), x, y))
    goedel = goedel if goedel is not None else tm.goedel
    automaton = Automaton(stack_alphabet, states, simulation_input=[tm.label(s) for s in tm.initial_tape])
    description = f'Exported Gödel number 0x{goedel:x}' if goedel is not None else ''
    return Flaci(automaton, 'UTM Export', description)


if __name__ == '__main__':
    from argparse import ArgumentParser
    from utm_args import setup_logging
    import canonical, goedel
    ap = ArgumentParser(description='Convert between Gödel numbers and FLACI JSON files.')
    ap.add_argument('-v', '--verbose', help='Log debug messages', action='store_true')
    sub = ap.add_subparsers(dest='command', required=True)
    ex = sub.add_parser('export', help='Write a Gödel number as a FLACI file')
    ex.add_argument('number', help='The Gödel number (with initial tape)')
    ex.add_argument('-b', '--base', help='Base of the number', type=int, choices=goedel.BASES, default=2)
    ex.add_argument('-o', '--output', help='Output path', default='utm_export.json')
    im = sub.add_parser('import', help='Print the Gödel number of a FLACI file')
    im.add_argument('path', help='FLACI JSON file')
    args = ap.parse_args()
    setup_logging(args.verbose)

    if args.command == 'export':
        tm = goedel.parse(args.number, args.base)
        if isinstance(tm, Rejection):
            ap.error(tm.message)
        from_definition(tm).save(args.output)
        print(f'Wrote {args.output}')
    else:
        flaci = load(args.path)
        if isinstance(flaci, Rejection):
            ap.error(flaci.message)
        for with_tape in True, False:
            n = canonical.encode_automaton(flaci.automaton, with_tape)
            if isinstance(n, Rejection):
                print(n)
                continue
            print('with tape:   ' if with_tape else 'without tape:', *(f'{b:>2}: {goedel.format_number(n, b)}' for b in goedel.BASES), sep='\n  ')
