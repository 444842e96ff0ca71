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
Program model of an ml program and generation of C code from it.

The parser (see ``runml.grammar``) turns the ml source into a tree of
``Node`` instances. ``ProgramNode.generate_code`` then emits the C
translation unit in three passes over that tree: global declarations
(including function prototypes), function definitions, and finally the
``main`` function that replays the top-level statements.
"""

import re

from runml.utils import indent, prefix_lines


__all__ = [
    'ARGUMENT_NAMES',
    'AssignmentNode',
    'CallNode',
    'Environment',
    'FunctionDefinitionNode',
    'GlobalAssignmentNode',
    'Node',
    'PrintNode',
    'ProgramNode',
    'ReturnNode',
    'is_constant',
]


# Globals that ``main`` fills from the program's command line arguments
ARGUMENT_NAMES = ('arg0', 'arg1')

INCLUDES = ('math.h', 'stdio.h', 'stdlib.h')

# ml identifiers never contain upper case letters, so ``Value`` cannot
# clash with a user name.
PRINT_TEMPLATE = """\
{
    double Value = (double)(%s);
    if (Value == trunc(Value)) {
        printf("%%.0f\\n", Value + 0.0);
    } else {
        printf("%%.6f\\n", Value);
    }
}"""

_CONSTANT = re.compile(r'[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?')


def is_constant(expression):
    """
    Check whether an expression is a plain numeric literal.

    Only such expressions are used as initializers of C globals, anything
    else is not a constant expression in every C compiler.
    """
    return _CONSTANT.fullmatch(expression.strip()) is not None


class Environment(object):
    """
    Code generation settings and state.
    """

    def __init__(self, header=None, debug=False):
        self.header = header
        self.debug = debug
        # Names declared in the current function, ``None`` outside of one
        self.locals = None

    def enter_function(self, params):
        self.locals = set(params)

    def leave_function(self):
        self.locals = None

    def declare_local(self, name):
        """
        Declare a local variable in the current function.

        Returns ``True`` if the name was not known in the function
        before, i.e. if a C declaration must be emitted.
        """
        if name in self.locals:
            return False
        self.locals.add(name)
        return True


class Node(list):
    """
    Base class for all nodes.

    Nodes are lists of their child nodes. ``lineno`` and ``source`` are
    the number and the (comment-free) text of the source line the node was
    created from.
    """

    _fields = ()

    def __init__(self, *args):
        super(Node, self).__init__()
        for field, value in zip(self._fields, args):
            setattr(self, field, value)
        self.lineno = None
        self.source = None

    def __repr__(self):
        args = ', '.join(repr(getattr(self, f)) for f in self._fields)
        s = '%s(%s)' % (self.__class__.__name__, args)
        if len(self):
            s += list.__repr__(self)
        return s

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        for field in self._fields:
            if getattr(self, field) != getattr(other, field):
                return False
        return list.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def annotate(self, env, code):
        """
        Prefix generated code with a comment pointing to the source line.

        Only active in debug mode.
        """
        if not env.debug or self.lineno is None:
            return code
        # A trailing backslash would continue the comment
        source = (self.source or '').rstrip('\\')
        return '// line %d: %s\n%s' % (self.lineno, source, code)

    def generate_code(self, env):
        raise NotImplementedError()


class StatementNode(Node):
    _fields = ('expression',)


class PrintNode(StatementNode):

    def generate_code(self, env):
        return self.annotate(env, PRINT_TEMPLATE % self.expression)


class ReturnNode(StatementNode):

    def generate_code(self, env):
        return self.annotate(env, 'return (%s);' % self.expression)


class CallNode(StatementNode):

    def generate_code(self, env):
        return self.annotate(env, '%s;' % self.expression)


class AssignmentNode(Node):
    """
    Assignment to a local variable inside a function.
    """

    _fields = ('name', 'expression')

    def generate_code(self, env):
        if env.declare_local(self.name):
            code = 'double %s = %s;' % (self.name, self.expression)
        else:
            code = '%s = %s;' % (self.name, self.expression)
        return self.annotate(env, code)


class GlobalAssignmentNode(Node):
    _fields = ('name', 'expression')

    def generate_declaration(self, env, initializer):
        code = 'double %s = %s;' % (self.name, initializer)
        return self.annotate(env, code)

    def generate_code(self, env):
        """
        Generate the assignment as a statement inside ``main``.
        """
        return self.annotate(env, '%s = %s;' % (self.name, self.expression))


class FunctionDefinitionNode(Node):
    """
    A function definition. The children are the body's statements.
    """

    _fields = ('name', 'params')

    def signature(self):
        params = ', '.join('double %s' % p for p in self.params)
        return 'double %s(%s)' % (self.name, params or 'void')

    def generate_prototype(self, env):
        return self.signature() + ';'

    def generate_code(self, env):
        lines = [self.annotate(env, self.signature() + ' {')]
        env.enter_function(self.params)
        try:
            for statement in self:
                lines.append(indent(statement.generate_code(env)))
        finally:
            env.leave_function()
        # Implicit return value if control reaches the end of the body
        lines.append(indent('return 0.0;'))
        lines.append('}')
        return '\n'.join(lines)


class ProgramNode(Node):
    """
    A complete ml program.

    The children are the top-level items in source order: global
    assignments, function definitions, and top-level print and call
    statements.
    """

    def global_assignments(self):
        return [n for n in self if isinstance(n, GlobalAssignmentNode)]

    def functions(self):
        return [n for n in self if isinstance(n, FunctionDefinitionNode)]

    def split_globals(self):
        """
        Decide how each global assignment is translated.

        Returns a tuple ``(declarations, deferred)``. ``declarations`` is a
        list of ``(node, initializer)`` pairs, one for each distinct global
        name. ``deferred`` is the list of assignments that have to be
        executed inside ``main``, at their position among the top-level
        statements, because their value is not a constant or because the
        name has already been declared.
        """
        declarations = []
        deferred = []
        declared = set(ARGUMENT_NAMES)
        for node in self.global_assignments():
            if node.name in declared:
                deferred.append(node)
                continue
            declared.add(node.name)
            if is_constant(node.expression):
                declarations.append((node, node.expression))
            else:
                declarations.append((node, '0.0'))
                deferred.append(node)
        return declarations, deferred

    def generate_preamble(self, env):
        lines = ['#include <%s>' % name for name in INCLUDES]
        lines.append('')
        lines.append('double %s;' % ', '.join('%s = 0.0' % name
                                              for name in ARGUMENT_NAMES))
        return '\n'.join(lines)

    def generate_declarations(self, env):
        declarations = self.split_globals()[0]
        sections = [
            '\n'.join(node.generate_declaration(env, initializer)
                      for node, initializer in declarations),
            '\n'.join(f.generate_prototype(env) for f in self.functions()),
        ]
        return '\n\n'.join(s for s in sections if s)

    def generate_definitions(self, env):
        return '\n\n'.join(f.generate_code(env) for f in self.functions())

    def generate_entry_point(self, env):
        lines = ['int main(int argc, char *argv[]) {']
        for i, name in enumerate(ARGUMENT_NAMES, 1):
            lines.append(indent('if (argc > %d) {\n    %s = atof(argv[%d]);\n}'
                                % (i, name, i)))
        deferred = set(id(node) for node in self.split_globals()[1])
        for node in self:
            if isinstance(node, (PrintNode, CallNode)) or id(node) in deferred:
                lines.append(indent(node.generate_code(env)))
        lines.append(indent('return 0;'))
        lines.append('}')
        return '\n'.join(lines)

    def generate_code(self, env):
        parts = []
        if env.header:
            parts.append(prefix_lines(env.header, '// '))
        parts.append(self.generate_preamble(env))
        parts.append(self.generate_declarations(env))
        parts.append(self.generate_definitions(env))
        parts.append(self.generate_entry_point(env))
        return '\n\n'.join(p for p in parts if p) + '\n'
