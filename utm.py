#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
import logging

from utm_tm import AlreadyHalted, Direction

log = logging.getLogger(__name__)


class Configuration:
    ''' A running TM: state, head position, step count, and a tape that is blank wherever it was never written.
        The tape is split at the origin: tape_right[i] is cell i >= 0, tape_left[j] is cell -j-1. '''
    __slots__ = ('tm', 'tape_right', 'tape_left', 'state', 'position', 'steps', 'finished', 'accepted')

    def __init__(self, tm):
        self.tm = tm
        self.tape_right, self.tape_left = list(tm.initial_tape), []
        self.state, self.position, self.steps = tm.START_STATE, 0, 0
        self.finished = self.accepted = False

    def copy(self):
        other = Configuration.__new__(Configuration)
        for attr in self.__slots__:
            setattr(other, attr, getattr(self, attr))
        other.tape_right, other.tape_left = list(self.tape_right), list(self.tape_left)
        return other

    def _cell(self, pos):
        return (self.tape_right, pos) if pos >= 0 else (self.tape_left, -pos-1)

    def read(self, offset=0):
        """ Return the symbol at the given offset from the head. """
        half, i = self._cell(self.position + offset)
        return half[i] if i < len(half) else self.tm.blank

    def write(self, symbol):
        half, i = self._cell(self.position)
        if i >= len(half):
            half.extend([self.tm.blank] * (i + 1 - len(half)))
        half[i] = symbol

    def step(self):
        ''' Apply one transition, or halt (accepting iff in the accepting state) if none applies. Return self. '''
        if self.finished:
            raise AlreadyHalted(f'Configuration already halted after {self.steps} steps')
        tr = self.tm.transition(self.state, self.read())
        if tr is None:
            self.finished = True
            self.accepted = self.state == self.tm.ACCEPT_STATE
            log.info('%s after %d steps in state q%d', 'Accepted' if self.accepted else 'Rejected', self.steps, self.state)
            return self
        log.debug('step %d: %s', self.steps, tr)
        self.write(tr.write)
        self.position += -1 if tr.direction == Direction.L else 1
        self.state = tr.to_state
        self.steps += 1
        return self

    def tape(self, lo, hi):
        ''' Return the symbols at offsets lo..hi (inclusive) from the head. '''
        return [self.read(i) for i in range(lo, hi+1)]

    def __str__(self):
        lo = min(-len(self.tape_left), self.position)
        hi = max(len(self.tape_right) - 1, self.position)
        label = self.tm.label
        cells = [f'[q{self.state}:{label(self.read(p - self.position))}]' if p == self.position else label(self.read(p - self.position)) for p in range(lo, hi+1)]
        return ' '.join(cells)


class Trace:
    ''' The configurations of a run, computed lazily: the initial one, one after every step, and the halted one (if the TM halts).
        Each iteration starts a new run. Unless snapshots is set, every item is the same live Configuration; copy() what you keep. '''
    def __init__(self, tm, snapshots=False):
        self.tm, self.snapshots = tm, snapshots

    def __iter__(self):
        config = Configuration(self.tm)
        yield config.copy() if self.snapshots else config
        while not config.finished:
            config.step()
            yield config.copy() if self.snapshots else config


def run(tm, step_limit=None):
    ''' Return the last configuration reached, running until the TM halts or step_limit transitions were taken. '''
    config = Configuration(tm)
    while not config.finished and (step_limit is None or config.steps < step_limit):
        config.step()
    return config


if __name__ == '__main__':
    import tqdm
    from utm_args import ArgumentParser, setup_logging, tm_args
    ap = ArgumentParser(description='Run TMs until they halt or exhaust a step limit.', parents=[tm_args()])
    ap.add_argument('-N', '--step-limit', help='Maximum number of transitions to apply', type=int, default=100000)
    ap.add_argument('-q', '--quiet', help='Do not show a progress bar', action='store_true')
    args = ap.parse_args()
    setup_logging(args.verbose)

    for tm in args.machines:
        with tqdm.tqdm(total=args.step_limit, desc=f'q{len(tm.states)}x{len(tm.alphabet)}', leave=False, disable=args.quiet) as bar:
            for config in Trace(tm):
                bar.update(config.steps - bar.n)
                if config.steps >= args.step_limit:
                    break
        outcome = 'accepted' if config.accepted else 'rejected' if config.finished else 'undecided'
        print(tm, outcome, f'steps={config.steps}', config, sep=', ')
