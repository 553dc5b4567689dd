#!/usr/bin/env python3

import itertools
import z3

from typing import Iterable, Mapping, Optional, Sequence, TextIO

from icinterpreter import State, Vm
from icprogram import IntcodeError, InvalidProgram, Mode, Opcode, decode, width

def run_program(program: Sequence[int], inputs: Iterable[int] = (), trace: Optional[TextIO] = None) -> list[int]:
    vm = Vm(program, trace=trace)
    vm.feed(*inputs)
    if vm.run() != State.HALTED:
        raise IntcodeError('program needs more input')
    return vm.drain()

def patch(program: Sequence[int], changes: Mapping[int, int]) -> list[int]:
    patched = list(program)
    for addr, value in changes.items():
        if addr < 0:
            raise IntcodeError(f'cannot patch negative address {addr}')
        if addr >= len(patched):
            patched.extend(0 for _ in range(addr + 1 - len(patched)))
        patched[addr] = value
    return patched

def amplify(program: Sequence[int], phases: Sequence[int], signal: int = 0) -> int:
    if not phases:
        raise IntcodeError('no phases given')
    for i, phase in enumerate(phases):
        output = run_program(program, [phase, signal])
        if len(output) != 1:
            raise IntcodeError(f'amplifier {i} produced {len(output)} outputs, expected 1')
        signal, = output
    return signal

def amplify_feedback(program: Sequence[int], phases: Sequence[int], signal: int = 0) -> int:
    """Run one amplifier per phase in a loop, each feeding the next.

    The first amplifier also receives the initial signal. Values sent to
    an amplifier that has already halted are dropped. Stops once the last
    amplifier halts and returns the last value it produced.
    """
    if not phases:
        raise IntcodeError('no phases given')
    amps = [Vm(program, name=f'amp{i}') for i in range(len(phases))]
    for amp, phase in zip(amps, phases):
        amp.feed(phase)
    pending = [signal]
    last: Optional[int] = None
    while not amps[-1].halted:
        progress = False
        for amp in amps:
            if amp.halted:
                pending = []
                continue
            amp.feed(*pending)
            ip = amp.ip
            amp.run()
            pending = amp.drain()
            progress = progress or bool(pending) or amp.halted or amp.ip != ip
        if pending:
            last = pending[-1]
        if not progress:
            raise IntcodeError('amplifiers are deadlocked waiting for input')
    if last is None:
        raise IntcodeError('last amplifier produced no output')
    return last

def best_phases(program: Sequence[int], phases: Iterable[int], feedback: bool = False) -> tuple[int, tuple[int, ...]]:
    phases = tuple(phases)
    if not phases:
        raise IntcodeError('no phases given')
    run = amplify_feedback if feedback else amplify
    best: Optional[tuple[int, tuple[int, ...]]] = None
    for order in itertools.permutations(phases):
        signal = run(program, order)
        if best is None or signal > best[0]:
            best = (signal, order)
    assert best is not None
    return best

def search_noun_verb(program: Sequence[int], target: int, limit: int = 100) -> tuple[int, int]:
    for noun in range(limit):
        for verb in range(limit):
            vm = Vm(patch(program, {1: noun, 2: verb}))
            try:
                vm.run()
            except InvalidProgram:
                continue
            if vm.halted and vm.memory.read(0) == target:
                return noun, verb
    raise IntcodeError(f'no noun and verb below {limit} produce {target}')

def _concrete(expr: z3.ArithRef, what: str) -> int:
    value = z3.simplify(expr)
    if not z3.is_int_value(value):
        raise IntcodeError(f'{what} depends on noun or verb')
    assert isinstance(value, z3.IntNumRef)
    return value.as_long()

def solve_noun_verb(program: Sequence[int], target: int, limit: int = 100) -> tuple[int, int]:
    """Find noun and verb symbolically instead of by search.

    Memory is a z3 array holding the program with the variables `noun`
    and `verb` at addresses 1 and 2. Only straight-line code is
    supported: every instruction word must stay concrete, and the only
    opcodes allowed are ADD, MUL, LT, EQ and HALT.
    """
    noun, verb = z3.Ints('noun verb')
    mem = z3.K(z3.IntSort(), z3.IntVal(0))
    for addr, value in enumerate(program):
        mem = z3.Store(mem, addr, value)
    mem = z3.Store(z3.Store(mem, 1, noun), 2, verb)
    ops = {
        Opcode.ADD: lambda a, b: a + b,
        Opcode.MUL: lambda a, b: a * b,
        Opcode.LT: lambda a, b: z3.If(a < b, 1, 0),
        Opcode.EQ: lambda a, b: z3.If(a == b, 1, 0),
    }
    guards: list[z3.BoolRef] = []
    def address(expr: z3.ArithRef, ip: int) -> z3.ArithRef:
        expr = z3.simplify(expr)
        if z3.is_int_value(expr):
            assert isinstance(expr, z3.IntNumRef)
            if expr.as_long() < 0:
                raise InvalidProgram(f'{ip}: negative address {expr.as_long()}')
        else:
            guards.append(expr >= 0)
        return expr
    ip = 0
    while True:
        inst = decode(_concrete(mem[ip], f'instruction at {ip}'), ip)
        if inst.op == Opcode.HALT:
            break
        if inst.op not in ops:
            raise IntcodeError(f'{ip}: {inst.op.name} is not supported in symbolic execution')
        if Mode.RELATIVE in inst.modes:
            raise IntcodeError(f'{ip}: relative mode is not supported in symbolic execution')
        def operand(i: int) -> z3.ArithRef:
            arg = z3.simplify(mem[ip + 1 + i])
            if inst.modes[i] == Mode.IMMEDIATE:
                return arg
            return z3.simplify(mem[address(arg, ip)])
        value = ops[inst.op](operand(0), operand(1))
        mem = z3.Store(mem, address(mem[ip + 3], ip), value)
        ip += width(inst.op)
    s = z3.Solver()
    s.add(mem[0] == target)
    s.add(noun >= 0, noun < limit, verb >= 0, verb < limit)
    # Addresses computed from noun or verb must not fault in the real machine.
    s.add(*guards)
    result = s.check()
    if result == z3.unknown:
        raise IntcodeError(f'solver gave up: {s.reason_unknown()}')
    if result != z3.sat:
        raise IntcodeError(f'no noun and verb below {limit} produce {target}')
    model = s.model()
    found = (model.eval(noun, model_completion=True), model.eval(verb, model_completion=True))
    return _concrete(found[0], 'noun'), _concrete(found[1], 'verb')

def encode_ascii(*lines: str) -> list[int]:
    values: list[int] = []
    for line in lines:
        values.extend(ord(ch) for ch in line)
        values.append(ord('\n'))
    return values

def decode_ascii(values: Iterable[int]) -> tuple[str, list[int]]:
    text: list[str] = []
    other: list[int] = []
    for value in values:
        if 0 <= value < 128:
            text.append(chr(value))
        else:
            other.append(value)
    return ''.join(text), other
