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
ml grammar and parser for runml.

ml is line oriented: each physical line holds exactly one construct. The
grammar elements below classify a single, comment-free line. ``Parser``
feeds the lines of a program through them and assembles the resulting
nodes into a ``ProgramNode``, tracking whether it is currently inside a
function body.
"""

import logging
import re

from pyparsing import *

from runml.ast import *
from runml.errors import (MalformedLineError, TranslationError,
                          UnrecognizedLineError)
from runml.registry import Registry
from runml.utils import count_leading, strip_comment


__all__ = ['Parser', 'parse_string', 'split_lines']


# Grammar elements are in all-caps.


log = logging.getLogger(__name__)


#
# UTILITY FUNCTIONS
#

def make_node_action(cls):
    """
    Make a parse action that creates a node from the matched strings.
    """
    def action(tokens):
        node = cls(*[t.strip() for t in tokens])
        # Nodes are lists, so pyparsing would splice their children into
        # the results if they weren't wrapped.
        return [node]
    return action


def add_node_action(pattern, cls):
    pattern.add_parse_action(make_node_action(cls))
    return pattern


#
# KEYWORDS
#

def make_keyword(s):
    # A keyword must be followed by whitespace or the end of the line,
    # ``print(x)`` is a call and not a print statement.
    kw = Regex(r'%s(?=\s|$)' % re.escape(s)).set_name(repr(s))
    globals()[s.upper()] = kw

for s in ['function', 'print', 'return']:
    make_keyword(s)


#
# BUILDING BLOCKS
#

NAME = Regex(r'\S+').set_name('name')

# The marker is a single token, ``x < -1`` is a comparison.
MARKER = Literal('<-')

REST = rest_of_line.copy()


#
# FUNCTION HEADERS
#

def function_header_action(tokens):
    names = list(tokens)
    name = names[0] if names else ''
    return [FunctionDefinitionNode(name, names[1:])]

FUNCTION_HEADER = Suppress(FUNCTION) + ZeroOrMore(NAME) + StringEnd()
FUNCTION_HEADER.set_parse_action(function_header_action)


#
# STATEMENTS
#

def make_assignment(cls):
    return add_node_action(SkipTo(MARKER) + Suppress(MARKER) + REST, cls)

GLOBAL_ASSIGNMENT = make_assignment(GlobalAssignmentNode)
LOCAL_ASSIGNMENT = make_assignment(AssignmentNode)

PRINT_STMT = add_node_action(Suppress(PRINT) + REST, PrintNode)
RETURN_STMT = add_node_action(Suppress(RETURN) + REST, ReturnNode)
CALL_STMT = add_node_action(Regex(r'.*\(.*'), CallNode)


#
# LINES
#

# Alternatives are tried in order, the first match wins.
TOP_LEVEL_LINE = (FUNCTION_HEADER | GLOBAL_ASSIGNMENT | PRINT_STMT |
                  RETURN_STMT | CALL_STMT)
BODY_LINE = LOCAL_ASSIGNMENT | PRINT_STMT | RETURN_STMT | CALL_STMT


def split_lines(code):
    """
    Split ml code into lines.

    Comments and blank lines are removed. Yields tuples ``(lineno,
    indented, text)`` where ``lineno`` is the 1-based line number,
    ``indented`` tells whether the line starts with a tab and ``text`` is
    the line without its indentation.
    """
    for lineno, line in enumerate(code.splitlines(), 1):
        line = strip_comment(line).rstrip()
        if not line.strip():
            continue
        tabs = count_leading(line, '\t')
        if not tabs and line[0].isspace():
            log.warning('Line %d is indented with spaces, only tabs start '
                        'a function body', lineno)
        yield lineno, tabs > 0, line.strip()


#
# PARSER
#

OUTSIDE = 'outside'
INSIDE_BODY = 'inside body'


class Parser(object):
    """
    Parser for ml programs.

    The parser is a state machine: it starts ``OUTSIDE`` of any function
    and moves ``INSIDE_BODY`` when it sees a function header. It stays
    there until the end of the input, every indented line is added to the
    most recent function. Each name a line introduces is added to the
    parser's ``registry``.

    If ``strict`` is ``True`` then lines that match no construct raise an
    ``UnrecognizedLineError``, otherwise they are skipped with a warning.
    """

    def __init__(self, registry=None, strict=True, filename=None):
        if registry is None:
            registry = Registry()
        self.registry = registry
        self.strict = strict
        self.filename = filename
        self.program = ProgramNode()
        self.function = None
        self.state = OUTSIDE

    def parse(self, code):
        """
        Parse ml code and return the ``ProgramNode``.
        """
        for lineno, indented, text in split_lines(code):
            self.parse_line(lineno, indented, text)
        return self.program

    def parse_line(self, lineno, indented, text):
        try:
            if indented:
                if self.state != INSIDE_BODY:
                    self.unrecognized(lineno, text,
                                      'Indented line outside of a function')
                    return
                node = self.match(BODY_LINE, text)
            else:
                node = self.match(TOP_LEVEL_LINE, text)
            if node is None:
                self.unrecognized(lineno, text, 'Unrecognized line')
                return
            node.lineno = lineno
            node.source = text
            self.add(node, indented)
        except TranslationError as e:
            if e.lineno is None:
                e.lineno = lineno
            if e.filename is None:
                e.filename = self.filename
            raise

    def match(self, pattern, text):
        try:
            return pattern.parse_string(text, parse_all=True)[0]
        except ParseException:
            return None

    def unrecognized(self, lineno, text, reason):
        if self.strict:
            raise UnrecognizedLineError('%s: %s' % (reason, text), lineno,
                                        self.filename)
        log.warning('%s:%d: %s, ignoring it: %s', self.filename or '<string>',
                    lineno, reason, text)

    def add(self, node, indented):
        lineno = node.lineno
        if isinstance(node, FunctionDefinitionNode):
            if not node.name:
                raise MalformedLineError('Function header without a name',
                                         lineno)
            self.registry.register(node.name, lineno)
            for param in node.params:
                self.registry.register(param, lineno)
            self.program.append(node)
            self.function = node
            self.state = INSIDE_BODY
            return
        if isinstance(node, (GlobalAssignmentNode, AssignmentNode)):
            if not node.name or re.search(r'\s', node.name):
                raise MalformedLineError('Invalid assignment: %s' %
                                         node.source, lineno)
            if not node.expression:
                raise MalformedLineError('Assignment without a value: %s' %
                                         node.source, lineno)
            self.registry.register(node.name, lineno)
        elif not node.expression:
            raise MalformedLineError('Statement without an expression: %s' %
                                     node.source, lineno)
        if indented:
            self.function.append(node)
        elif isinstance(node, ReturnNode):
            self.unrecognized(lineno, node.source,
                              'Return statement outside of a function')
        else:
            self.program.append(node)


#
# PUBLIC INTERFACE
#

def parse_string(s, registry=None, strict=True, filename=None):
    """
    Parse string containing ml code.

    Returns the corresponding ``ProgramNode``.
    """
    return Parser(registry, strict, filename).parse(s)
