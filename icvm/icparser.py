#!/usr/bin/env python3

import pyparsing as pp

int_lit = pp.pyparsing_common.signed_integer.copy()
int_lit.set_name('integer')
comma = pp.Suppress(',')

# Whitespace is only tolerated after the last number.
program = int_lit + (comma - int_lit)[...]
program.leave_whitespace()
program.set_name('program')
parser = program

def parse_string(text: str) -> list[int]:
    prog = parser.parse_string(text, parse_all=True).as_list()
    assert all(isinstance(x, int) for x in prog)
    return prog

def parse_file(filename: str) -> list[int]:
    prog = parser.parse_file(filename, parse_all=True).as_list()
    assert all(isinstance(x, int) for x in prog)
    return prog
