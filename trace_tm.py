#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2025 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
from itertools import islice

from utm import Trace

STATE_COLOR = ((255, 0, 0), (0, 255, 0), (255, 128, 0), (0, 0, 255), (255, 0, 255), (0, 255, 255), (255, 255, 0))


def tape_bounds(tm, step_limit):
    ''' Return the leftmost and rightmost cells visited or written in the first step_limit steps. '''
    l, r = 0, max(len(tm.initial_tape) - 1, 0)
    for config in islice(Trace(tm), step_limit + 1):
        l, r = min(l, config.position), max(r, config.position)
    return l, r


def text_rows(tm, step_limit):
    ''' Yield a line per configuration: the visited tape, with the head cell shown as [q<state>:<symbol>]. '''
    l, r = tape_bounds(tm, step_limit)
    for config in islice(Trace(tm), step_limit + 1):
        cells = []
        for pos in range(l, r+1):
            s = tm.label(config.read(pos - config.position))
            cells.append(f'[q{config.state}:{s}]' if pos == config.position else s)
        yield ' '.join(cells)


def main(tm, step_limit, name, png=False):
    with open(f'utm_{name}.txt', 'w', encoding='utf-8') as out:
        for row in text_rows(tm, step_limit):
            print(row, file=out)
    if png: save_png(tm, step_limit, f'utm_{name}.png')


def save_png(tm, step_limit, path):
    ''' Draw a space-time diagram: one pixel row per configuration, grey by symbol, the head coloured by state. Requires Pillow. '''
    from PIL import Image
    l, r = tape_bounds(tm, step_limit)
    rows = list(islice(Trace(tm, snapshots=True), step_limit + 1))
    img = Image.new('RGB', (r - l + 1, len(rows)), color='black')
    pix = img.load()
    shades = max(len(tm.alphabet) - 1, 1)
    for row, config in enumerate(rows):
        for pos in range(l, r+1):
            s = config.read(pos - config.position)
            # The blank is drawn black, like the rest of the unbounded tape.
            pix[pos - l, row] = (0, 0, 0) if s == tm.blank else (round(255 * (s - 1) / shades),) * 3
        pix[config.position - l, row] = STATE_COLOR[(config.state - 1) % len(STATE_COLOR)]
    img.save(path)
    return img


if __name__ == '__main__':
    from utm_args import ArgumentParser, setup_logging, tm_args
    ap = ArgumentParser(description='Diagram a TM run (text/png).', parents=[tm_args()])
    ap.add_argument('-N', '--step-limit', help='Number of steps to show.', type=int, default=1000)
    ap.add_argument('-p', '--png', help='Emit a PNG file', action='store_true')
    args = ap.parse_args()
    setup_logging(args.verbose)
    for i, tm in enumerate(args.machines):
        main(tm, step_limit=args.step_limit, name=f'{tm.goedel:x}'[:16] if tm.goedel else str(i), png=args.png)
