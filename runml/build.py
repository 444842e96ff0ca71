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
Building and running the C code generated by runml.

The generated code is written to a temporary directory, compiled with
the system's C compiler and executed. The temporary directory and
everything in it is removed afterwards, no matter whether compiling or
running succeeded.
"""

import logging
import os
import shlex
import subprocess
import tempfile

from runml.errors import CompilationError, ExecutableNotFoundError


__all__ = ['CFLAGS', 'LIBS', 'compile_and_run', 'compile_program',
           'default_compiler', 'run_program']


log = logging.getLogger(__name__)

CFLAGS = ['-std=c11', '-Wall', '-Werror']
LIBS = ['-lm']


def default_compiler():
    """
    The C compiler from the ``CC`` environment variable, or ``cc``.
    """
    return os.environ.get('CC') or 'cc'


def compile_program(c_filename, exec_filename, cc=None, cflags=None):
    """
    Compile a C source file into an executable.

    ``cc`` is the compiler command (see ``default_compiler``) and
    ``cflags`` a list of compiler flags which defaults to ``CFLAGS``.
    The compiler's own diagnostics go to the terminal, a failed
    compilation raises a ``CompilationError``.
    """
    if cc is None:
        cc = default_compiler()
    if cflags is None:
        cflags = CFLAGS
    cmd = (shlex.split(cc) + list(cflags) + ['-o', exec_filename, c_filename]
           + LIBS)
    log.debug('Compiling: %s', ' '.join(cmd))
    try:
        result = subprocess.run(cmd, check=False)
    except OSError as e:
        raise CompilationError('Could not run C compiler "%s": %s' % (cc, e))
    if result.returncode != 0:
        raise CompilationError('Compilation failed.')
    if not os.path.isfile(exec_filename):
        raise ExecutableNotFoundError('Executable not found: %s' %
                                      exec_filename)
    return exec_filename


def run_program(exec_filename, args=()):
    """
    Run an executable and wait for it to finish.

    ``args`` are passed to the program as its command line arguments.
    Returns the program's exit status, which is negative if the program
    was killed by a signal.
    """
    cmd = [os.path.abspath(exec_filename)] + [str(arg) for arg in args]
    log.debug('Running: %s', ' '.join(cmd))
    try:
        result = subprocess.run(cmd, check=False)
    except OSError as e:
        raise ExecutableNotFoundError('Could not run %s: %s' %
                                      (exec_filename, e))
    log.debug('Program exited with status %d', result.returncode)
    return result.returncode


def compile_and_run(code, args=(), cc=None, cflags=None):
    """
    Compile and run a string of C code.

    Returns the exit status of the program, see ``run_program``.
    """
    pid = os.getpid()
    with tempfile.TemporaryDirectory(prefix='runml-') as tmpdir:
        c_filename = os.path.join(tmpdir, 'ml-%d.c' % pid)
        exec_filename = os.path.join(tmpdir, 'ml_executable_%d' % pid)
        with open(c_filename, 'w') as f:
            f.write(code)
        compile_program(c_filename, exec_filename, cc=cc, cflags=cflags)
        status = run_program(exec_filename, args)
    log.debug('Removed %s', tmpdir)
    return status
