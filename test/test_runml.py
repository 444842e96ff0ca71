#!/usr/bin/env python
# vim:fileencoding=utf8

"""
Tests for ``runml``.
"""

import logging
import shlex
import shutil
import tempfile

import pytest

import runml
from runml.ast import (AssignmentNode, CallNode, FunctionDefinitionNode,
					   GlobalAssignmentNode, PrintNode, ReturnNode)
from runml.build import compile_and_run, default_compiler
from runml.errors import *
from runml.grammar import parse_string, split_lines
from runml.registry import Registry, is_valid_identifier
from runml.utils import add_line_numbers


needs_cc = pytest.mark.skipif(
	shutil.which(shlex.split(default_compiler())[0]) is None,
	reason='No C compiler available')


ADD_PROGRAM = """\
x <- 3
function add a b
	return a + b
print add(x, 2)
"""

ADD_PROGRAM_C = """\
#include <math.h>
#include <stdio.h>
#include <stdlib.h>

double arg0 = 0.0, arg1 = 0.0;

double x = 3;

double add(double a, double b);

double add(double a, double b) {
    return (a + b);
    return 0.0;
}

int main(int argc, char *argv[]) {
    if (argc > 1) {
        arg0 = atof(argv[1]);
    }
    if (argc > 2) {
        arg1 = atof(argv[2]);
    }
    {
        double Value = (double)(add(x, 2));
        if (Value == trunc(Value)) {
            printf("%.0f\\n", Value + 0.0);
        } else {
            printf("%.6f\\n", Value);
        }
    }
    return 0;
}
"""


#######################################################################
# IDENTIFIERS                                                         #
#######################################################################

def test_valid_identifiers():
	for name in ['x', 'foo_bar', 'a' * 12, '9lives', 'x-y', '_']:
		assert is_valid_identifier(name), name

def test_invalid_identifiers():
	for name in ['', 'a' * 13, 'Foo', 'fOo', 'foO', 'X', 'abcdefghijklM']:
		assert not is_valid_identifier(name), name

def test_register_is_idempotent():
	registry = Registry()
	registry.register('x')
	registry.register('x')
	assert len(registry) == 1
	assert registry.exists('x')
	assert 'x' in registry
	assert 'y' not in registry

def test_register_invalid_identifier():
	registry = Registry()
	with pytest.raises(InvalidIdentifierError) as info:
		registry.register('Foo', 3)
	assert info.value.identifier == 'Foo'
	assert info.value.lineno == 3
	assert 'Foo' in str(info.value)
	assert '12 characters' in str(info.value)
	assert len(registry) == 0

def test_registry_capacity():
	registry = Registry(3)
	for name in 'abc':
		registry.register(name)
	# Known names do not count again
	registry.register('a')
	with pytest.raises(IdentifierCapacityError):
		registry.register('d')
	assert list(registry) == ['a', 'b', 'c']


#######################################################################
# PARSING                                                             #
#######################################################################

def test_split_lines():
	code = "# comment\n\nx <- 1 # one\n\tprint x\n   \nprint 2\n"
	assert list(split_lines(code)) == [
		(3, False, 'x <- 1'),
		(4, True, 'print x'),
		(6, False, 'print 2'),
	]

def test_space_indentation_warns(caplog):
	with caplog.at_level(logging.WARNING):
		lines = list(split_lines("  print 1\n"))
	assert lines == [(1, False, 'print 1')]
	assert 'indented with spaces' in caplog.text

def test_global_assignment():
	program = parse_string("x <- 3\ny<-3.5\n")
	assert list(program) == [GlobalAssignmentNode('x', '3'),
			GlobalAssignmentNode('y', '3.5')]
	assert program[0].lineno == 1
	assert program[1].lineno == 2
	assert program[1].source == 'y<-3.5'

def test_function_definition():
	program = parse_string(ADD_PROGRAM)
	assert len(program) == 3
	function = program[1]
	assert isinstance(function, FunctionDefinitionNode)
	assert function.name == 'add'
	assert function.params == ['a', 'b']
	assert list(function) == [ReturnNode('a + b')]
	assert program[2] == PrintNode('add(x, 2)')

def test_function_body_statements():
	program = parse_string(
		"function f n\n"
		"\tprint n\n"
		"\tm <- n * 2\n"
		"\tg(m)\n"
		"\treturn m\n"
	)
	assert list(program[0]) == [
		PrintNode('n'),
		AssignmentNode('m', 'n * 2'),
		CallNode('g(m)'),
		ReturnNode('m'),
	]

def test_function_without_parameters():
	function = parse_string("function hello\n\tprint 1\n")[0]
	assert function.name == 'hello'
	assert function.params == []

def test_function_body_continues_after_top_level_line():
	program = parse_string("function f\n\tprint 1\nprint 2\n\tprint 3\n")
	assert list(program[0]) == [PrintNode('1'), PrintNode('3')]
	assert program[1] == PrintNode('2')

def test_next_header_starts_new_function():
	program = parse_string("function f\n\tprint 1\nfunction g\n\tprint 2\n")
	assert [f.name for f in program.functions()] == ['f', 'g']
	assert list(program[1]) == [PrintNode('2')]

def test_marker_must_be_adjacent():
	program = parse_string("print 1 < -1\nprint 2 -1<3\n")
	assert list(program) == [PrintNode('1 < -1'), PrintNode('2 -1<3')]

def test_print_keyword_needs_whitespace():
	program = parse_string("print(1)\nprinter(2)\n")
	assert list(program) == [CallNode('print(1)'), CallNode('printer(2)')]

def test_top_level_call():
	assert list(parse_string("f(1, 2)\n")) == [CallNode('f(1, 2)')]

def test_malformed_lines():
	for code in ["<- 3\n", "x <-\n", "a b <- 3\n", "function\n", "print\n",
				 "function f\n\treturn\n", "print a <- 3\n"]:
		with pytest.raises(MalformedLineError):
			parse_string(code)

def test_unrecognized_lines():
	for code in ["hello\n", "\tprint 1\n", "return 1\n",
				 "function f\n\tfunction g\n"]:
		with pytest.raises(UnrecognizedLineError):
			parse_string(code)

def test_unrecognized_line_number():
	with pytest.raises(UnrecognizedLineError) as info:
		parse_string("x <- 1\n\nwhat is this\n", filename='prog.ml')
	assert info.value.lineno == 3
	assert str(info.value).startswith('prog.ml:3: ')

def test_lenient_mode(caplog):
	with caplog.at_level(logging.WARNING):
		program = parse_string("hello\nreturn 1\n\tprint 0\nprint 1\n",
							   strict=False)
	assert list(program) == [PrintNode('1')]
	assert 'hello' in caplog.text
	assert 'Return statement outside of a function' in caplog.text

def test_invalid_identifiers_in_program():
	for code in ["Foo <- 1\n", "function Add a\n", "function add A\n",
				 "function f\n\tLocal <- 1\n", "abcdefghijklm <- 1\n"]:
		with pytest.raises(InvalidIdentifierError):
			parse_string(code)

def test_invalid_identifier_line_number():
	with pytest.raises(InvalidIdentifierError) as info:
		runml.translate_string("x <- 1\nfunction Bad\n", filename='bad.ml')
	assert info.value.lineno == 2
	assert info.value.filename == 'bad.ml'
	assert 'Bad' in str(info.value)

def test_registry_is_filled():
	registry = Registry()
	parse_string(ADD_PROGRAM, registry=registry)
	assert list(registry) == ['x', 'add', 'a', 'b']

def test_redefinition_is_accepted():
	registry = Registry()
	parse_string("x <- 1\nx <- 2\nfunction f x\n", registry=registry)
	assert list(registry) == ['x', 'f']


#######################################################################
# CODE GENERATION                                                     #
#######################################################################

def test_translate_program():
	assert runml.translate_string(ADD_PROGRAM) == ADD_PROGRAM_C

def test_translation_is_deterministic():
	assert runml.translate_string(ADD_PROGRAM) == runml.translate_string(
			ADD_PROGRAM)

def test_translate_file(tmp_path):
	path = tmp_path / 'add.ml'
	path.write_text(ADD_PROGRAM)
	with open(str(path)) as f:
		assert runml.translate_file(f) == ADD_PROGRAM_C

def test_translate_file_uses_filename(tmp_path):
	path = tmp_path / 'broken.ml'
	path.write_text("print 1\nnonsense\n")
	with open(str(path)) as f:
		with pytest.raises(UnrecognizedLineError) as info:
			runml.translate_file(f)
	assert info.value.filename == str(path)

def test_constant_globals():
	c_code = runml.translate_string("x <- 3\ny <- 3.5\nz <- -1e3\n")
	assert 'double x = 3;\ndouble y = 3.5;\ndouble z = -1e3;\n' in c_code

def test_non_constant_globals_are_deferred():
	c_code = runml.translate_string("x <- 2\ny <- x * 3\nprint y\n")
	assert 'double x = 2;\ndouble y = 0.0;\n' in c_code
	main = c_code[c_code.index('int main'):]
	assert main.index('    y = x * 3;\n') < main.index('(double)(y)')

def test_repeated_global_is_declared_once():
	c_code = runml.translate_string("x <- 1\nx <- 2\n")
	assert c_code.count('double x') == 1
	assert '    x = 2;\n' in c_code

def test_deferred_globals_keep_source_order():
	c_code = runml.translate_string("x <- 1\nprint x\nx <- 2\nprint x\n")
	main = c_code[c_code.index('int main'):]
	first = main.index('(double)(x)')
	assert first < main.index('    x = 2;\n') < main.index('(double)(x)', first + 1)

def test_argument_globals_are_assigned_in_main():
	c_code = runml.translate_string("arg0 <- 5\n")
	assert 'double arg0 = 5' not in c_code
	main = c_code[c_code.index('int main'):]
	assert main.index('arg0 = atof(argv[1]);') < main.index('    arg0 = 5;')

def test_prototypes_precede_definitions():
	c_code = runml.translate_string(
		"function f\n\treturn g() + 1\nfunction g\n\treturn 2\n")
	assert 'double f(void);\ndouble g(void);\n' in c_code
	assert c_code.index('double g(void);') < c_code.index('double f(void) {')

def test_local_assignments():
	c_code = runml.translate_string(
		"function f a\n\tt <- a\n\tt <- t + 1\n\ta <- t\n\treturn a\n")
	assert ('double f(double a) {\n'
			'    double t = a;\n'
			'    t = t + 1;\n'
			'    a = t;\n'
			'    return (a);\n'
			'    return 0.0;\n'
			'}\n') in c_code

def test_locals_are_per_function():
	c_code = runml.translate_string(
		"function f\n\tt <- 1\nfunction g\n\tt <- 2\n")
	assert '    double t = 1;\n' in c_code
	assert '    double t = 2;\n' in c_code

def test_call_statements():
	c_code = runml.translate_string(
		"function f\n\tprint 1\nfunction g\n\tf()\nf()\ng()\n")
	assert 'double g(void) {\n    f();\n    return 0.0;\n}' in c_code
	assert '    f();\n    g();\n    return 0;\n}\n' in c_code

def test_print_in_function():
	c_code = runml.translate_string("function f x\n\tprint x / 2\n")
	assert ('double f(double x) {\n'
			'    {\n'
			'        double Value = (double)(x / 2);\n') in c_code

def test_only_top_level_prints():
	c_code = runml.translate_string("print 1\nprint 2.5\n")
	assert 'return 0.0;' not in c_code
	assert c_code.count('double Value') == 2
	assert c_code.index('(double)(1)') < c_code.index('(double)(2.5)')
	assert c_code.startswith('#include <math.h>\n')

def test_header():
	c_code = runml.translate_string("print 1\n", header='Generated\nby runml')
	assert c_code.startswith('// Generated\n// by runml\n\n#include')

def test_debug_comments():
	c_code = runml.translate_string(ADD_PROGRAM, debug=True)
	assert '// line 1: x <- 3\ndouble x = 3;' in c_code
	assert '    // line 3: return a + b\n    return (a + b);' in c_code
	assert '    // line 4: print add(x, 2)\n    {' in c_code

def test_capacity_exceeded():
	code = ''.join('v%d <- %d\n' % (i, i) for i in range(51))
	with pytest.raises(IdentifierCapacityError) as info:
		runml.translate_string(code)
	assert info.value.lineno == 51
	runml.translate_string(code, max_identifiers=51)

def test_custom_registry_capacity():
	with pytest.raises(IdentifierCapacityError):
		runml.translate_string("function f a b\n", registry=Registry(2))


#######################################################################
# COMPILING AND RUNNING                                               #
#######################################################################

def assert_ml(capfd, code, expected, args=(), status=0):
	"""
	Test that translating, compiling and running ml code works.

	``expected`` is the expected output of the program and ``status`` its
	expected exit status. ``args`` are passed to the program.
	"""
	c_code = runml.translate_string(code)

	def msg(s):
		return (s + "\n\nml code:\n\n" + add_line_numbers(code) +
				"\n\nC code:\n\n" + add_line_numbers(c_code))

	result = compile_and_run(c_code, args)
	out, err = capfd.readouterr()
	assert result == status, msg("Wrong exit status %d: %s" % (result, err))
	assert out == expected, msg("Wrong output: Expected %r, got %r." %
								(expected, out))

@pytest.mark.slow
@needs_cc
def test_run_add(capfd):
	assert_ml(capfd, ADD_PROGRAM, "5\n")
	assert_ml(capfd,
		"function add a b\n\treturn a + b\nprint add(2,3)\nprint add(2,3.5)\n",
		"5\n5.500000\n")

@pytest.mark.slow
@needs_cc
def test_run_number_formatting(capfd):
	assert_ml(capfd,
		"print 0 - 3\nprint 1.0 / 3\nprint 0.0 * -1\nprint 1e15\nprint -2.5\n",
		"-3\n0.333333\n0\n1000000000000000\n-2.500000\n")

@pytest.mark.slow
@needs_cc
def test_run_globals(capfd):
	assert_ml(capfd, "x <- 2\ny <- x * 3\nprint y\nx <- 4\nprint x\n",
			  "6\n4\n")

@pytest.mark.slow
@needs_cc
def test_run_reassigned_globals(capfd):
	assert_ml(capfd, "x <- 1\nprint x\nx <- 2\nprint x\n", "1\n2\n")
	assert_ml(capfd,
		"function f\n"
		"\tprint 7\n"
		"\treturn 1\n"
		"print 0\n"
		"y <- f()\n"
		"print y\n",
		"0\n7\n1\n")

@pytest.mark.slow
@needs_cc
def test_run_functions(capfd):
	assert_ml(capfd,
		"function twice n\n"
		"\tprint n\n"
		"\treturn helper(n) * 2\n"
		"function helper n\n"
		"\tm <- n + 1\n"
		"\tm <- m - 1\n"
		"\treturn m\n"
		"function nothing\n"
		"\tprint 7\n"
		"print twice(21)\n"
		"print nothing()\n",
		"21\n42\n7\n0\n")

@pytest.mark.slow
@needs_cc
def test_run_call_statements(capfd):
	assert_ml(capfd,
		"# Say hello\n"
		"function hello\n"
		"\tprint 42\n"
		"hello()\n"
		"hello()\n",
		"42\n42\n")

@pytest.mark.slow
@needs_cc
def test_run_arguments(capfd):
	assert_ml(capfd, "print arg0 + arg1\n", "5.500000\n", args=('2', '3.5'))
	assert_ml(capfd, "print arg0 + arg1\n", "7\n", args=('7',))

@pytest.mark.slow
@needs_cc
def test_run_exit_status(capfd):
	assert_ml(capfd, "print 1\nexit(3)\nprint 2\n", "1\n", status=3)

@pytest.mark.slow
@needs_cc
def test_compilation_failure(capfd):
	c_code = runml.translate_string("nosuchfunction(1)\n")
	with pytest.raises(CompilationError):
		compile_and_run(c_code)

@pytest.mark.slow
@needs_cc
def test_temporary_files_are_removed(capfd, monkeypatch, tmp_path):
	monkeypatch.setattr(tempfile, 'tempdir', str(tmp_path))
	compile_and_run(runml.translate_string("print 1\n"))
	with pytest.raises(CompilationError):
		compile_and_run(runml.translate_string("nosuchfunction(1)\n"))
	assert list(tmp_path.iterdir()) == []

def test_missing_compiler():
	with pytest.raises(CompilationError):
		compile_and_run(runml.translate_string("print 1\n"),
						cc='runml-no-such-compiler')
