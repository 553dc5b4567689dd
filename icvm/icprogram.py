#!/usr/bin/env python3

from enum import IntEnum, unique
from types import MappingProxyType
from typing import Iterator, NamedTuple, Sequence

class IntcodeError(RuntimeError):
    pass

class InvalidProgram(IntcodeError):
    pass

@unique
class Opcode(IntEnum):
    ADD = 1             # mem[c] <- a + b
    MUL = 2             # mem[c] <- a * b
    IN = 3              # mem[a] <- input
    OUT = 4             # output <- a
    JMP_IF = 5          # if a != 0 goto b
    JMP_UNLESS = 6      # if a == 0 goto b
    LT = 7              # mem[c] <- a < b
    EQ = 8              # mem[c] <- a == b
    ARB = 9             # rb <- rb + a
    HALT = 99

@unique
class Mode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2

# 'r' operands are read through their mode, 'w' operands name a store address.
OPERANDS = MappingProxyType({
    Opcode.ADD: 'rrw',
    Opcode.MUL: 'rrw',
    Opcode.IN: 'w',
    Opcode.OUT: 'r',
    Opcode.JMP_IF: 'rr',
    Opcode.JMP_UNLESS: 'rr',
    Opcode.LT: 'rrw',
    Opcode.EQ: 'rrw',
    Opcode.ARB: 'r',
    Opcode.HALT: '',
})

_widths = MappingProxyType({op: 1 + len(kinds) for op, kinds in OPERANDS.items()})

Inst = NamedTuple('Inst', op=Opcode, modes=tuple[Mode, ...])

def width(op: Opcode) -> int:
    return _widths[op]

def decode(word: int, addr: int = 0) -> Inst:
    """Split an instruction word into its opcode and operand modes.

    Only the mode digits of operands the opcode actually has are checked.
    Raises InvalidProgram on an unknown opcode, an unknown mode, or an
    immediate-mode store target.
    """
    if word < 0:
        raise InvalidProgram(f'{addr}: invalid instruction {word}')
    try:
        op = Opcode(word % 100)
    except ValueError:
        raise InvalidProgram(f'{addr}: invalid opcode {word % 100} in {word}') from None
    modes: list[Mode] = []
    digits = word // 100
    for i, kind in enumerate(OPERANDS[op]):
        digit = digits % 10
        digits //= 10
        try:
            mode = Mode(digit)
        except ValueError:
            raise InvalidProgram(f'{addr}: invalid mode {digit} for operand {i + 1} of {word}') from None
        if kind == 'w' and mode == Mode.IMMEDIATE:
            raise InvalidProgram(f'{addr}: immediate mode store target in {word}')
        modes.append(mode)
    return Inst(op, tuple(modes))

def format_operand(mode: Mode, value: int) -> str:
    if mode == Mode.POSITION:
        return f'[{value}]'
    elif mode == Mode.IMMEDIATE:
        return str(value)
    else:
        assert mode == Mode.RELATIVE
        return f'[rb{value:+d}]'

def format_inst(inst: Inst, args: Sequence[int]) -> str:
    operands = (format_operand(mode, arg) for mode, arg in zip(inst.modes, args))
    return ' '.join((inst.op.name, *operands))

def disassemble(program: Sequence[int]) -> Iterator[tuple[int, str]]:
    addr = 0
    length = len(program)
    while addr < length:
        word = program[addr]
        try:
            inst = decode(word, addr)
        except InvalidProgram:
            yield addr, f'DATA {word}'
            addr += 1
            continue
        size = width(inst.op)
        if addr + size > length:
            yield addr, f'DATA {word}'
            addr += 1
            continue
        yield addr, format_inst(inst, program[addr + 1:addr + size])
        addr += size
