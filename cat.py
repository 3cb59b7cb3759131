#!/usr/bin/python3
import sys
import os

from catlib import (Options, CatState, CatWorker, SourceOpenError,
                    ReadError, WriteError, NUMBER_ALL, NUMBER_NONBLANK,
                    parse_args, open_file)


USAGE = """\
Usage: %(prog)s [OPTION]... [FILE]...
Concatenate FILE(s) to standard output.

With no FILE, read standard input.

Options:
    -b              number nonempty output lines, overridden by -n
    -E, -e          display $ at end of each line
    -n              number all output lines
    -s              suppress repeated empty output lines
    -t, -T          display TAB characters as ^I
    -u              (ignored) for compatibility
    -v              use ^ notation for non-printing characters, except TAB
    -h, -?, --help  display this help and exit

Examples:
    %(prog)s f g    Output f's contents, then g's contents.
    %(prog)s        Copy standard input to standard output.
"""

HELP_FLAGS = ('-h', '-?', '--help')


class Cat:

    def __init__(self, cmd_name=None, bs=None, input_file=None,
                 output_file=None, error_file=None):
        self.cmd_name = cmd_name or 'cat'
        self.bs = bs or 8192
        self.ifile = input_file
        self.ofile = output_file or os.fdopen(sys.stdout.fileno(), 'wb',
                                                closefd=False)
        self.efile = error_file or sys.stderr

    def parse_args(self, args):
        request = {'number': {'flag': '-n'},
                   'number_nonblank': {'flag': '-b'},
                   'show_ends': {'flag': ['-e', '-E']},
                   'squeeze_blank': {'flag': '-s'},
                   'show_tabs': {'flag': ['-t', '-T']},
                   'unbuffered': {'flag': '-u'},
                   'show_nonprinting': {'flag': '-v'},
                   'help': {'flag': list(HELP_FLAGS)},
        }
        return parse_args(args, request)

    def comprehend_params(self, options):
        # -n wins over -b no matter the order
        if 'number' in options:
            numbering = NUMBER_ALL
        elif 'number_nonblank' in options:
            numbering = NUMBER_NONBLANK
        else:
            numbering = None
        return Options(numbering=numbering,
                       show_ends='show_ends' in options,
                       squeeze_blank='squeeze_blank' in options,
                       show_tabs='show_tabs' in options,
                       show_nonprinting='show_nonprinting' in options)

    def print_help(self):
        try:
            self.ofile.write((USAGE % {'prog': self.cmd_name}).encode())
            self.ofile.flush()
        except OSError as e:
            self.discard_output()
            raise WriteError(str(e)) from e

    def run(self, args):
        """Return False if any of the files failed. WriteError is
        raised when the output is unusable.
        """
        # help is only honoured in the first position
        if args and args[0] in HELP_FLAGS:
            self.print_help()
            self.close_output()
            return True

        options, files = self.parse_args(args)
        options = self.comprehend_params(options)

        # when no file specified for reading, use stdin.
        if not files:
            files = [None]

        status = True
        try:
            for file in files:
                status = self.work(file, options) and status
        except WriteError:
            self.discard_output()
            raise
        self.close_output()
        return status

    def close_output(self):
        try:
            self.ofile.close()
        except OSError as e:
            raise WriteError(str(e)) from e

    def discard_output(self):
        """Close the failed output, the buffered data is lost anyway."""
        try:
            self.ofile.close()
        except OSError:
            pass

    def report(self, file, e):
        name = '<stdin>' if file is None else file
        print('%s: Error reading %s: %s' % (self.cmd_name, name, e),
              file=self.efile)

    def work(self, file, options):
        """Process one source with a fresh state"""
        try:
            if file is None and self.ifile:
                ifile = self.ifile
            else:
                ifile = open_file(file)
        except SourceOpenError as e:
            self.report(file, e)
            return False

        worker = CatWorker(ifile, self.ofile, options, CatState(), self.bs)
        try:
            worker.run()
        except ReadError as e:
            self.report(file, e)
            return False
        finally:
            if file is not None:
                ifile.close()
        return True


def main():
    app = Cat()
    args = sys.argv[1:]
    try:
        app.run(args)
    except WriteError as e:
        print('%s: write error: %s' % (app.cmd_name, e), file=sys.stderr)
        exit(1)
    exit(0)


if __name__ == '__main__':
    main()
