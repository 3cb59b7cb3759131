import sys
import os
from collections import namedtuple


class CatError(Exception): pass
class SourceOpenError(CatError): pass
class ReadError(CatError): pass
class WriteError(CatError): pass


NUMBER_ALL = 'all'
NUMBER_NONBLANK = 'nonblank'

# printable ASCII, space excluded
GRAPHIC = frozenset(chr(c) for c in range(0x21, 0x7f))
WHITESPACE = frozenset(' \t\n\x0c\r')
# str.isspace() takes these, trim-style blank detection does not
SEPARATORS = frozenset('\x1c\x1d\x1e\x1f')


Options = namedtuple('Options', ['numbering', 'show_ends', 'squeeze_blank',
                                 'show_tabs', 'show_nonprinting'])
Options.__new__.__defaults__ = (None, False, False, False, False)


def parse_args(args, request):
    """Split the argument list into options and the other arguments.

    request maps an option name to its flags, like:

        {'number': {'flag': ['-n']}, 'help': {'flag': '--help'}}

    Only an exact match counts as a flag, grouped short flags such as
    '-ns' are left as ordinary arguments. The returned options dict
    holds the name of every option present, mapped to True, the
    ordinary arguments keep their original order.
    """
    lookup = {}
    for name, spec in request.items():
        flags = spec['flag']
        if isinstance(flags, str):
            flags = [flags]
        for flag in flags:
            lookup[flag] = name

    options = {}
    others = []
    for arg in args:
        if arg in lookup:
            options[lookup[arg]] = True
        else:
            others.append(arg)
    return options, others


def open_file(file):
    """Open a named source for binary reading, no name means stdin.
    '-' is an ordinary file name here.
    """
    if file is None:
        return os.fdopen(sys.stdin.fileno(), 'rb', closefd=False)
    try:
        return open(file, 'rb')
    except OSError as e:
        raise SourceOpenError(e.strerror or str(e)) from e


class CatState:
    """Counter and blank tracking for one source"""

    def __init__(self, line_counter=1, previous_blank=False):
        self.line_counter = line_counter
        self.previous_blank = previous_blank


class CatWorker:

    """Transform the lines of one input file, write them to ofile."""

    def __init__(self, ifile, ofile, options, state=None, bs=None):
        self.ifile = ifile
        self.ofile = ofile
        self.options = options
        self.state = state or CatState()
        self.bs = bs or 8192

        # the terminal is read and flushed line by line
        if ifile.isatty():
            self.read = self.read_tty

    def read(self):
        """Read a chunk of whole lines"""
        return self.ifile.readlines(self.bs)

    def read_tty(self):
        line = self.ifile.readline()
        return [line] if line else []

    def decode(self, data):
        """Strip the terminator, return the line as text"""
        if data.endswith(b'\n'):
            data = data[:-1]
            if data.endswith(b'\r'):
                data = data[:-1]
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ReadError(str(e)) from e

    def number(self, is_blank):
        numbering = self.options.numbering
        if numbering == NUMBER_ALL or (numbering == NUMBER_NONBLANK
                                       and not is_blank):
            prefix = '%6d\t' % self.state.line_counter
            self.state.line_counter += 1
            return prefix
        return ''

    def render(self, line):
        """Apply the -t and -v character rendering to the line body."""
        show_tabs = self.options.show_tabs
        show_nonprinting = self.options.show_nonprinting
        if not (show_tabs or show_nonprinting):
            return line

        res = []
        for char in line:
            if char == '\t':
                res.append('^I' if show_tabs else char)
            elif (show_nonprinting and char not in GRAPHIC
                    and char not in WHITESPACE
                    and ord(char) + 64 <= sys.maxunicode):
                res.append('^' + chr(ord(char) + 64))
            else:
                res.append(char)
        return ''.join(res)

    def transform(self, line):
        """Return the output for one line, or None if it is squeezed."""
        state = self.state
        is_blank = not line.strip() and not SEPARATORS.intersection(line)
        if self.options.squeeze_blank and is_blank and state.previous_blank:
            return None
        state.previous_blank = is_blank

        prefix = self.number(is_blank)
        body = self.render(line)
        end = '$' if self.options.show_ends else ''
        return '%s%s%s\n' % (prefix, body, end)

    def write(self, text):
        try:
            self.ofile.write(text.encode('utf-8'))
        except OSError as e:
            raise WriteError(str(e)) from e

    def flush(self):
        try:
            self.ofile.flush()
        except OSError as e:
            raise WriteError(str(e)) from e

    def run(self):
        while True:
            try:
                lines = self.read()
            except OSError as e:
                raise ReadError(e.strerror or str(e)) from e
            if not lines:
                break
            for data in lines:
                out = self.transform(self.decode(data))
                if out is not None:
                    self.write(out)
            self.flush()
