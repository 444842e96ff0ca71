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
Exceptions raised by runml.

Every failure is fatal for the current translation or run. Nothing inside
the package catches these, the command line interface turns them into a
diagnostic and a non-zero exit status.
"""

__all__ = [
    'RunmlError',
    'TranslationError',
    'IdentifierError',
    'InvalidIdentifierError',
    'IdentifierCapacityError',
    'MalformedLineError',
    'UnrecognizedLineError',
    'BuildError',
    'CompilationError',
    'ExecutableNotFoundError',
]


class RunmlError(Exception):
    """
    Base class for all runml errors.
    """


class TranslationError(RunmlError):
    """
    An error in the ml source code.

    ``lineno`` is the 1-based number of the offending source line and
    ``filename`` the name of the source file. Both are optional and are
    prepended to the message if present.
    """

    def __init__(self, message, lineno=None, filename=None):
        super(TranslationError, self).__init__(message)
        self.message = message
        self.lineno = lineno
        self.filename = filename

    def __str__(self):
        location = []
        if self.filename:
            location.append(self.filename)
        if self.lineno is not None:
            location.append(str(self.lineno))
        if location:
            return '%s: %s' % (':'.join(location), self.message)
        return self.message


class IdentifierError(TranslationError):
    pass


class InvalidIdentifierError(IdentifierError):
    """
    An identifier is too long or contains upper case characters.
    """

    def __init__(self, identifier, lineno=None, filename=None):
        message = ('Invalid identifier: %s (max 12 characters and no upper '
                   'case characters)' % identifier)
        super(InvalidIdentifierError, self).__init__(message, lineno, filename)
        self.identifier = identifier


class IdentifierCapacityError(IdentifierError):
    """
    More distinct identifiers than the registry can hold.
    """

    def __init__(self, capacity, lineno=None, filename=None):
        message = 'Maximum number of identifiers (%d) exceeded' % capacity
        super(IdentifierCapacityError, self).__init__(message, lineno,
                                                      filename)
        self.capacity = capacity


class MalformedLineError(TranslationError):
    pass


class UnrecognizedLineError(TranslationError):
    pass


class BuildError(RunmlError):
    pass


class CompilationError(BuildError):
    pass


class ExecutableNotFoundError(BuildError):
    pass
