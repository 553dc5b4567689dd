#!/usr/bin/env python3

import ichosts
import icinterpreter
import icparser
import icprogram

import optparse
import pyparsing
import sys

from typing import Optional

def parse_args(argv: list[str]) -> tuple[optparse.Values, list[str]]:
    usage = 'usage: %prog [options] filename'
    p = optparse.OptionParser(usage=usage)
    p.add_option('--input',
                 metavar='\'VALUES...\'',
                 action='store',
                 type='string',
                 default='',
                 help='feed VALUES to the program before running it'
                 )
    p.add_option('--set',
                 metavar='ADDR=VALUE',
                 action='append',
                 default=[],
                 dest='changes',
                 help='store VALUE at ADDR before running, may be repeated'
                 )
    p.add_option('--interactive',
                 action='store_true',
                 default=False,
                 help='read more input from stdin whenever the program waits for it'
                 )
    p.add_option('--ascii',
                 action='store_true',
                 default=False,
                 help='exchange text lines instead of numbers'
                 )
    p.add_option('--trace',
                 action='store_true',
                 default=False,
                 help='display executed instructions step by step'
                 )
    p.add_option('--dis',
                 action='store_true',
                 default=False,
                 help='disassemble program'
                 )
    p.add_option('--amplify',
                 metavar='\'PHASES...\'',
                 action='store',
                 type='string',
                 help='run a chain of amplifiers with PHASES'
                 )
    p.add_option('--best',
                 metavar='\'PHASES...\'',
                 action='store',
                 type='string',
                 help='find the ordering of PHASES giving the largest signal'
                 )
    p.add_option('--feedback',
                 action='store_true',
                 default=False,
                 help='connect the last amplifier back to the first'
                 )
    p.add_option('--noun-verb',
                 metavar='TARGET',
                 action='store',
                 type='int',
                 dest='target',
                 help='find the noun and verb that leave TARGET at address 0'
                 )
    p.add_option('--brute',
                 action='store_true',
                 default=False,
                 help='search noun and verb exhaustively instead of solving'
                 )
    return p.parse_args(argv)

def parse_values(values: str) -> list[int]:
    try:
        return [int(v) for v in values.replace(',', ' ').split()]
    except ValueError:
        raise icprogram.IntcodeError(f'malformed values `{values}`') from None

def parse_changes(changes: list[str]) -> dict[int, int]:
    patches: dict[int, int] = {}
    for change in changes:
        try:
            addr, value = change.split('=')
            patches[int(addr)] = int(value)
        except ValueError:
            raise icprogram.IntcodeError(f'malformed change `{change}`') from None
    return patches

def show(values: list[int], ascii: bool):
    if not values:
        return
    if ascii:
        text, other = ichosts.decode_ascii(values)
        print(text, end='')
        if other:
            print(','.join(map(str, other)))
    else:
        print(','.join(map(str, values)))

def run(prog: list[int], options: optparse.Values) -> Optional[int]:
    trace = sys.stderr if options.trace else None
    vm = icinterpreter.Vm(prog, trace=trace)
    if options.ascii:
        if options.input:
            vm.feed(*ichosts.encode_ascii(options.input))
    else:
        vm.feed(*parse_values(options.input))
    while True:
        state = vm.run()
        show(vm.drain(), options.ascii)
        if state == icinterpreter.State.HALTED:
            return 0
        if not options.interactive:
            print('error: program needs more input', file=sys.stderr)
            return 1
        try:
            line = input('Input: ' if not options.ascii else '')
        except EOFError:
            print('error: program needs more input', file=sys.stderr)
            return 1
        if options.ascii:
            vm.feed(*ichosts.encode_ascii(line))
        else:
            vm.feed(*parse_values(line))

def dis(prog: list[int]) -> Optional[int]:
    for addr, text in icprogram.disassemble(prog):
        print(f'{addr:04d} {text}')

def amplify(prog: list[int], phases: str, feedback: bool) -> Optional[int]:
    if feedback:
        print(ichosts.amplify_feedback(prog, parse_values(phases)))
    else:
        print(ichosts.amplify(prog, parse_values(phases)))

def best(prog: list[int], phases: str, feedback: bool) -> Optional[int]:
    signal, order = ichosts.best_phases(prog, parse_values(phases), feedback)
    print(f'{signal} from phases {" ".join(map(str, order))}')

def noun_verb(prog: list[int], target: int, brute: bool) -> Optional[int]:
    if brute:
        noun, verb = ichosts.search_noun_verb(prog, target)
    else:
        noun, verb = ichosts.solve_noun_verb(prog, target)
    print(f'noun {noun}, verb {verb} ({100 * noun + verb})')

def main(argv: list[str]) -> Optional[int]:
    options, args = parse_args(argv)
    try:
        filename = args[1]
    except IndexError:
        print('error: no file provided', file=sys.stderr)
        return 1
    try:
        prog = icparser.parse_file(filename)
        prog = ichosts.patch(prog, parse_changes(options.changes))
        if options.dis:
            return dis(prog)
        elif options.target is not None:
            return noun_verb(prog, options.target, options.brute)
        elif options.best is not None:
            return best(prog, options.best, options.feedback)
        elif options.amplify is not None:
            return amplify(prog, options.amplify, options.feedback)
        else:
            return run(prog, options)
    except OSError as os_err:
        print(f'error: {os_err.filename}: {os_err.strerror}', file=sys.stderr)
        return 1
    except pyparsing.exceptions.ParseBaseException as pe:
        print(pe.explain(depth=0), file=sys.stderr)
        return 1
    except icprogram.IntcodeError as ie:
        print(f'{filename}:{ie.args[0]}', file=sys.stderr)
        return 1

if __name__ == '__main__':
    status = main(sys.argv)
    sys.exit(status)
