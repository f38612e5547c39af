"""Conversion of interpreter output to drawable tokens

The output of the interpreter is split into literal text runs, color changes
and line breaks. This is not a terminal emulator: only the escape codes
recognized by the active color scheme change the color; any other escape
sequence is kept as literal text.
"""
import re
from collections import namedtuple

# Color escape codes and line feeds. The capturing group keeps delimiters in
# the result of re.split
TOKEN_DELIMITERS = re.compile(r'(\x1b\[\d{1,2}m|\n)')


class RecordCountError(ValueError):
    pass


_Token = namedtuple('_Token', ['kind', 'value'])


class Token(_Token):
    """Atomic unit of rendering

    kind: One of TEXT, COLOR or NEWLINE
    value: Text to draw, color to switch to or None for line breaks
    """
    TEXT = 'text'
    COLOR = 'color'
    NEWLINE = 'newline'


class Text(Token):
    def __new__(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError('Text tokens must hold a non-empty string, got {!r}'
                             .format(value))
        return super().__new__(cls, Token.TEXT, value)

    def __repr__(self):
        return 'Text({!r})'.format(self.value)


class ColorChange(Token):
    def __new__(cls, value):
        return super().__new__(cls, Token.COLOR, value)

    def __repr__(self):
        return 'ColorChange({!r})'.format(self.value)


class Newline(Token):
    def __new__(cls):
        return super().__new__(cls, Token.NEWLINE, None)

    def __repr__(self):
        return 'Newline()'


def split_records(blob, marker, count):
    """Split the combined output of several commands on the end-of-record
    marker

    Raise RecordCountError if the number of segments is not `count`: pairing
    commands with the wrong output is never acceptable.
    """
    segments = blob.split(marker)
    if len(segments) != count:
        raise RecordCountError('Expected {} output records separated by "{}", '
                               'found {}'.format(count, marker, len(segments)))
    return segments


def parse_output(segment, colors):
    """Return the list of tokens for the output of a single command

    :param segment: Output of the command
    :param colors: Mapping between recognized escape codes and colors
    """
    tokens = []
    for fragment in TOKEN_DELIMITERS.split(segment):
        if fragment in colors:
            tokens.append(ColorChange(colors[fragment]))
        elif fragment == '\n':
            tokens.append(Newline())
        elif fragment:
            tokens.append(Text(fragment))
    return tokens


def parse_records(blob, marker, count, colors):
    """Return one list of tokens per command from the combined output"""
    return [parse_output(segment, colors)
            for segment in split_records(blob, marker, count)]


def strip_tokens(tokens):
    """Return the plain text represented by tokens, without colors"""
    parts = []
    for token in tokens:
        if token.kind == Token.TEXT:
            parts.append(token.value)
        elif token.kind == Token.NEWLINE:
            parts.append('\n')
    return ''.join(parts)


def reset_color(tokens, color):
    """Return tokens followed by a change to `color` if the tokens leave
    another color active"""
    tokens = list(tokens)
    active = color
    for token in tokens:
        if token.kind == Token.COLOR:
            active = token.value
    if active != color:
        tokens.append(ColorChange(color))
    return tokens
