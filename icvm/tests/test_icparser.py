#!/usr/bin/env python3

import os
import tempfile
import unittest
import pyparsing as pp

import icparser

class TestIcParser(unittest.TestCase):
    def test_single(self):
        self.assertEqual(icparser.parse_string('99'), [99])

    def test_program(self):
        self.assertEqual(icparser.parse_string('1,9,10,3,2,3,11,0,99,30,40,50'),
                         [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])

    def test_signed(self):
        self.assertEqual(icparser.parse_string('109,-1,+5,0'), [109, -1, 5, 0])

    def test_large(self):
        self.assertEqual(icparser.parse_string('104,1125899906842624,99'), [104, 1125899906842624, 99])

    def test_trailing_newline(self):
        self.assertEqual(icparser.parse_string('3,0,4,0,99\n'), [3, 0, 4, 0, 99])

    def test_malformed(self):
        for text in ['', '1,,2', '1,2,', '1;2', '1, 2', ' 1,2', 'a,1', '1.5']:
            with self.subTest(text=text):
                with self.assertRaises(pp.ParseBaseException):
                    icparser.parse_string(text)

    def test_file(self):
        fd, filename = tempfile.mkstemp(suffix='.txt')
        try:
            with os.fdopen(fd, 'w') as f:
                f.write('1101,5,6,0,99\n')
            self.assertEqual(icparser.parse_file(filename), [1101, 5, 6, 0, 99])
        finally:
            os.remove(filename)
