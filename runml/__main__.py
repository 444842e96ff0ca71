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

import argparse
import logging
import sys

from runml import translate_file
from runml.build import compile_and_run
from runml.errors import RunmlError
from runml.registry import MAX_IDENTIFIERS


def error(message):
    sys.stderr.write('! Error: %s\n' % message)
    return 1


class ArgumentParser(argparse.ArgumentParser):
    """
    Argument parser that exits with status 1 on usage errors.
    """

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, '! Error: %s\n' % message)


def main(argv=None):
    parser = ArgumentParser(prog='runml',
            description='Translate an ml program to C, compile and run it')
    parser.add_argument('infile', help='ml source file')
    parser.add_argument('args', nargs=argparse.REMAINDER,
            help='Arguments passed on to the ml program')
    parser.add_argument('-t', '--translate', action='store_true',
            help='Only translate to C instead of compiling and running')
    parser.add_argument('-o', '--outfile', type=argparse.FileType('w'),
            default=sys.stdout,
            help='Output file for --translate (default STDOUT)')
    parser.add_argument('-d', '--debug', action='store_true',
            help='Generate code for easier debugging')
    parser.add_argument('--header', help='Comment to put at the top of the C code')
    parser.add_argument('--lenient', action='store_true',
            help='Skip unrecognized lines instead of failing')
    parser.add_argument('--max-identifiers', type=int, default=MAX_IDENTIFIERS,
            help='Maximum number of distinct identifiers (default %(default)s)')
    parser.add_argument('--cc', help='C compiler (default $CC or cc)')
    parser.add_argument('-v', '--verbose', action='store_true',
            help='Show debug output')
    args = parser.parse_args(argv)

    logging.basicConfig(format='%(levelname)s: %(message)s',
            level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        infile = open(args.infile, 'r', encoding='utf-8')
    except (IOError, OSError):
        return error('Could not open %s' % args.infile)
    try:
        with infile:
            code = translate_file(infile, header=args.header, debug=args.debug,
                    max_identifiers=args.max_identifiers,
                    strict=not args.lenient)
        if args.translate:
            args.outfile.write(code)
            if args.outfile is not sys.stdout:
                args.outfile.close()
            return 0
        status = compile_and_run(code, args.args, cc=args.cc)
    except RunmlError as e:
        return error(e)
    except UnicodeDecodeError as e:
        return error('Could not decode %s: %s' % (args.infile, e))
    if status < 0:
        # Killed by a signal, report it the way shells do
        return 128 - status
    return status

if __name__ == '__main__':
    sys.exit(main())
