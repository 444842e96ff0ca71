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
Registry of the identifiers introduced by an ml program.
"""

import logging

from runml.errors import IdentifierCapacityError, InvalidIdentifierError


__all__ = ['MAX_IDENTIFIERS', 'MAX_IDENTIFIER_LENGTH', 'Registry',
           'is_valid_identifier']


log = logging.getLogger(__name__)

MAX_IDENTIFIERS = 50
MAX_IDENTIFIER_LENGTH = 12


def is_valid_identifier(name):
    """
    Check whether ``name`` is a valid ml identifier.

    Valid identifiers are non-empty, at most 12 characters long and
    contain no upper case letters. Everything else is allowed. The empty
    name passes both the length and the case rule but is rejected anyway,
    since it can never appear as a C identifier.
    """
    if not name or len(name) > MAX_IDENTIFIER_LENGTH:
        return False
    return not any('A' <= c <= 'Z' for c in name)


class Registry(object):
    """
    Flat namespace of variable, parameter and function names.

    Names are never removed. Registering a name twice has no effect.
    """

    def __init__(self, capacity=MAX_IDENTIFIERS):
        self.capacity = capacity
        self.names = []
        self._known = set()

    def __len__(self):
        return len(self.names)

    def __contains__(self, name):
        return self.exists(name)

    def __iter__(self):
        return iter(self.names)

    def __repr__(self):
        return 'Registry(%r)' % self.names

    def validate(self, name):
        return is_valid_identifier(name)

    def exists(self, name):
        return name in self._known

    def register(self, name, lineno=None):
        """
        Add a name to the registry.

        Raises ``InvalidIdentifierError`` if ``name`` is not a valid
        identifier and ``IdentifierCapacityError`` if adding it would
        exceed the registry's capacity. ``lineno`` is only used for the
        error message.
        """
        if not self.validate(name):
            raise InvalidIdentifierError(name, lineno)
        if name in self._known:
            return
        if len(self.names) >= self.capacity:
            raise IdentifierCapacityError(self.capacity, lineno)
        log.debug('Registered identifier %r', name)
        self.names.append(name)
        self._known.add(name)
