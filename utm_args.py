# SPDX-FileCopyrightText: 2023 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
from argparse import Action, ArgumentParser
from collections.abc import Sequence
import logging

from utm_tm import Rejection

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s: %(message)s'


def tm_args():
    """Return an ArgumentParser that lets the user specify TMs as Gödel numbers or FLACI files, parsed into 'machines': Sequence[TM]. """
    ap = ArgumentParser(add_help=False)
    ap.add_argument('-b', '--base', help='Base of the Gödel numbers given', type=int, choices=(2, 10, 16), default=2)
    ap.add_argument('-f', '--flaci', help='Treat all arguments as FLACI JSON files', action='store_true')
    ap.add_argument('-v', '--verbose', help='Log debug messages', action='store_true')
    ap.add_argument('machines', help='Gödel numbers or FLACI .json files', nargs='*', action=_AddMachineList, default=MachineList())
    return ap


def setup_logging(verbose=False):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


class _AddMachineList(Action):
    def __call__(self, parser, namespace, values, option_string=None):
        machines = namespace.machines = MachineList()
        machines._namespace, machines._parser = namespace, parser
        machines._texts.extend(values)


class MachineList(Sequence):
    ''' TMs named on the command line, decoded when first used. An unusable argument ends the program with a usage error. '''
    def __init__(self):
        self._namespace = self._parser = None
        self._texts = []

    def __len__(self):
        return len(self._texts)

    def __getitem__(self, i):
        return self._tm(self._texts[i])

    def _tm(self, text):
        import canonical, flaci, goedel
        if self._namespace.flaci or text.endswith('.json'):
            result = flaci.load(text)
            if not isinstance(result, Rejection):
                result = canonical.to_definition(result.automaton)
        else:
            result = goedel.parse(text, self._namespace.base)
        if isinstance(result, Rejection):
            self._parser.error(f'{text[:40]}: {result}')
        return result
