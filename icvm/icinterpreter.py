#!/usr/bin/env python3

from collections import deque
from enum import Enum
from typing import Iterable, Optional, TextIO

from icprogram import IntcodeError, InvalidProgram, Mode, Opcode, decode, format_inst, width

class State(Enum):
    READY = 'ready'
    RUNNING = 'running'
    SUSPENDED = 'suspended'
    HALTED = 'halted'
    FAULTED = 'faulted'

class Memory:
    """Zero-filled memory that grows to cover any non-negative address touched."""

    def __init__(self, program: Iterable[int] = ()):
        self._cells = list(program)

    def __len__(self) -> int:
        return len(self._cells)

    def _fit(self, addr: int):
        if addr < 0:
            raise InvalidProgram(f'negative address {addr}')
        n = addr + 1 - len(self._cells)
        if n > 0:
            self._cells.extend(0 for _ in range(n))

    def read(self, addr: int) -> int:
        self._fit(addr)
        return self._cells[addr]

    def write(self, addr: int, value: int):
        self._fit(addr)
        self._cells[addr] = value

    def dump(self) -> list[int]:
        return self._cells[:]

class Vm:
    def __init__(self, program: Optional[Iterable[int]] = None, name: str = '', trace: Optional[TextIO] = None):
        self.name = name
        self.trace = trace
        self.memory = Memory()
        self.ip = 0
        self.relative_base = 0
        self.state = State.READY
        self.inputs: deque[int] = deque()
        self.outputs: list[int] = []
        if program is not None:
            self.load(program)

    @property
    def halted(self) -> bool:
        return self.state == State.HALTED

    def load(self, program: Iterable[int]):
        memory = Memory(program)
        if len(memory) == 0:
            raise InvalidProgram('empty program')
        self.memory = memory
        self.ip = 0
        self.relative_base = 0
        self.state = State.READY
        self.inputs.clear()
        self.outputs.clear()

    def feed(self, *values: int):
        if self.state == State.RUNNING:
            raise IntcodeError(f'{self.name or "machine"}: cannot feed input while running')
        self.inputs.extend(values)

    def drain(self) -> list[int]:
        outputs = self.outputs
        self.outputs = []
        return outputs

    def _log(self, msg: str):
        if self.trace is not None:
            prefix = f'{self.name} ' if self.name else ''
            print(f'{prefix}{msg}', file=self.trace)

    def run(self) -> State:
        if self.state == State.HALTED:
            return self.state
        if self.state == State.FAULTED:
            raise InvalidProgram(f'{self.name or "machine"}: faulted at {self.ip}')
        mem = self.memory
        inputs = self.inputs
        outputs = self.outputs
        ip = self.ip
        args: list[int] = []
        modes: tuple[Mode, ...] = ()
        def load(i: int) -> int:
            mode = modes[i]
            if mode == Mode.IMMEDIATE:
                return args[i]
            elif mode == Mode.RELATIVE:
                return mem.read(self.relative_base + args[i])
            return mem.read(args[i])
        def addr(i: int) -> int:
            if modes[i] == Mode.RELATIVE:
                return self.relative_base + args[i]
            return args[i]
        def store(i: int, value: int):
            dest = addr(i)
            mem.write(dest, value)
            self._log(f'  -> {value} at {dest}')
        def add() -> bool:
            store(2, load(0) + load(1))
            return True
        def mul() -> bool:
            store(2, load(0) * load(1))
            return True
        def in_() -> bool:
            if not inputs:
                return False
            store(0, inputs.popleft())
            return True
        def out() -> bool:
            value = load(0)
            outputs.append(value)
            self._log(f'  -> output {value}')
            return True
        def jmp_if() -> bool:
            nonlocal ip
            if load(0) != 0:
                ip = load(1) - width(Opcode.JMP_IF)
            return True
        def jmp_unless() -> bool:
            nonlocal ip
            if load(0) == 0:
                ip = load(1) - width(Opcode.JMP_UNLESS)
            return True
        def lt() -> bool:
            store(2, int(load(0) < load(1)))
            return True
        def eq() -> bool:
            store(2, int(load(0) == load(1)))
            return True
        def arb() -> bool:
            self.relative_base += load(0)
            return True
        def halt() -> bool:
            self.state = State.HALTED
            return True
        code = {
            Opcode.ADD: add,
            Opcode.MUL: mul,
            Opcode.IN: in_,
            Opcode.OUT: out,
            Opcode.JMP_IF: jmp_if,
            Opcode.JMP_UNLESS: jmp_unless,
            Opcode.LT: lt,
            Opcode.EQ: eq,
            Opcode.ARB: arb,
            Opcode.HALT: halt,
        }
        self.state = State.RUNNING
        try:
            while self.state == State.RUNNING:
                self.ip = ip
                inst = decode(mem.read(ip), ip)
                size = width(inst.op)
                modes = inst.modes
                args = [mem.read(ip + i) for i in range(1, size)]
                self._log(f'[{ip}] {format_inst(inst, args)}')
                if not code[inst.op]():
                    self.state = State.SUSPENDED
                    self._log('needs input')
                    break
                if self.state == State.HALTED:
                    self._log('halted')
                    break
                ip += size
        except BaseException:
            if self.state == State.RUNNING:
                self.state = State.FAULTED
            raise
        return self.state
