#!/usr/bin/env python
# vim:fileencoding=utf8

# Copyright (c) 2014 Florian Brucker
#
# Permission is hereby granted, free of charge, to any person obtaining
# a copy of this software and associated documentation files (the
# "Software"), to deal in the Software without restriction, including
# without limitation the rights to use, copy, modify, merge, publish,
# distribute, sublicense, and/or sell copies of the Software, and to
# permit persons to whom the Software is furnished to do so, subject to
# the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Various utilities.
"""

import math


COMMENT_CHAR = '#'


def strip_comment(line, comment_char=COMMENT_CHAR):
    """
    Remove a trailing comment from a line.
    """
    pos = line.find(comment_char)
    if pos == -1:
        return line
    return line[:pos]

def count_leading(s, char):
    """
    Count how often ``char`` is repeated at the beginning of ``s``.
    """
    return len(s) - len(s.lstrip(char))

def prefix_lines(s, p):
    """
    Prefix each line of ``s`` by ``p``.
    """
    return p + ('\n' + p).join(s.splitlines())

def indent(s, level=1, width=4):
    """
    Indent each non-empty line of ``s`` by ``level`` steps.
    """
    prefix = ' ' * (level * width)
    return '\n'.join(prefix + line if line else line
                     for line in s.splitlines())

def add_line_numbers(text, margin="  "):
    """
    Add line numbers to a text.
    """
    lines = text.splitlines()
    if not lines:
        return text
    num_digits = int(math.floor(math.log10(len(lines)))) + 1
    format_str = '%%%dd%s%%s' % (num_digits, margin)
    nums = range(1, len(lines) + 1)
    return '\n'.join(format_str % (n, line) for (n, line) in zip(nums, lines))
