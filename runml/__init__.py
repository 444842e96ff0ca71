#!/usr/bin/env python
# vim:fileencoding=utf8

"""
An ml to C translator.
"""

__version__ = '0.2.0'


import runml.ast
import runml.grammar
from runml.errors import *
from runml.registry import MAX_IDENTIFIERS, Registry


def translate_file(infile, *args, **kwargs):
	"""
	Translate an ml file to C.

	``infile`` is an open readable file containing the ml source code. The
	return value is a string containing the translated C code. The file's
	name is used in error messages unless a ``filename`` is given.

	See ``translate_string`` for additional arguments.
	"""
	kwargs.setdefault('filename', getattr(infile, 'name', None))
	return translate_string(infile.read(), *args, **kwargs)


def translate_string(code, header=None, debug=False, filename=None,
		registry=None, max_identifiers=MAX_IDENTIFIERS, strict=True):
	"""
	Translate an ml code string to C.

	``header`` is an optional string that is inserted at the beginning of the
	generated code. It is automatically prefixed with comment markers.

	If ``debug`` is ``True`` then each generated statement is preceded by a
	comment containing the number and text of the ml line it was created from.

	``registry`` is the ``Registry`` that collects the program's identifiers.
	If it is ``None`` then a new one with room for ``max_identifiers`` names
	is used.

	If ``strict`` is ``False`` then lines that are not valid ml are skipped
	with a warning instead of raising an ``UnrecognizedLineError``.
	"""
	if registry is None:
		registry = Registry(max_identifiers)
	node = runml.grammar.parse_string(code, registry=registry, strict=strict,
			filename=filename)
	env = runml.ast.Environment(header=header, debug=debug)
	return node.generate_code(env)
