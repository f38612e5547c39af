"""Command scripts

A script lists the commands typed in the animation, one JSON object per line:

    {"text": "1 + 2 * 3", "delay": 5}
    {"text": "'Hello'.repeat(3)", "delay": 2.5, "font_size": 18}
    {"text": "clear()", "delay": 1, "clear": true}

text: Source typed at the prompt and sent to the interpreter
delay: Time in seconds during which the output stays on screen
font_size: Optional font size used while this command is displayed
clear: Optional flag; if true the screen is cleared before typing

Empty lines and lines starting with '#' are ignored.
"""
import json
from collections import namedtuple


class ScriptError(Exception):
    pass


_Command = namedtuple('_Command', ['text', 'delay', 'font_size', 'clear'])


class Command(_Command):
    """Command typed in the animation"""
    types = {
        'text': (str,),
        'delay': (int, float),
        'font_size': (type(None), int),
        'clear': (bool,),
    }

    def __new__(cls, text, delay, font_size=None, clear=False):
        self = super(Command, cls).__new__(cls, text, delay, font_size, clear)
        for attr_name in cls._fields:
            attr = getattr(self, attr_name)
            # bool is a subclass of int but is never a valid number here
            if (not isinstance(attr, cls.types[attr_name]) or
                    (attr_name != 'clear' and isinstance(attr, bool))):
                raise ScriptError('Invalid type for attribute {}: {} (expected one of {})'
                                  .format(attr_name, type(attr), cls.types[attr_name]))
        if delay < 0:
            raise ScriptError('Invalid delay: {} (expected a positive number)'
                              .format(delay))
        if font_size is not None and font_size <= 0:
            raise ScriptError('Invalid font size: {} (expected a positive integer)'
                              .format(font_size))
        return self

    def to_json_line(self):
        attributes = self._asdict()
        if attributes['font_size'] is None:
            del attributes['font_size']
        if not attributes['clear']:
            del attributes['clear']
        return json.dumps(attributes, ensure_ascii=False)

    @classmethod
    def from_json_line(cls, line):
        try:
            attributes = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ScriptError('Invalid JSON: {}'.format(exc)) from exc

        if not isinstance(attributes, dict):
            raise ScriptError('Expected a JSON object, got: {}'.format(line.strip()))

        unknown = set(attributes) - set(cls._fields)
        if unknown:
            raise ScriptError('Unknown attributes: {}'
                              .format(', '.join(sorted(unknown))))

        missing = {'text', 'delay'} - set(attributes)
        if missing:
            raise ScriptError('Missing attributes: {}'
                              .format(', '.join(sorted(missing))))

        return cls(**attributes)


def parse_commands(lines):
    """Return the list of commands described by lines of a script

    Raise ScriptError if a line is invalid or if there is no command at all"""
    commands = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip() or line.lstrip().startswith('#'):
            continue
        try:
            commands.append(Command.from_json_line(line))
        except ScriptError as exc:
            raise ScriptError('Line {}: {}'.format(line_number, exc)) from exc

    if not commands:
        raise ScriptError('The script does not contain any command')
    return commands


def read_commands(filename):
    """Read the list of commands from a script file"""
    try:
        with open(filename, 'r', encoding='utf-8') as script_file:
            return parse_commands(script_file)
    except OSError as exc:
        raise ScriptError('Cannot read script "{}": {}'.format(filename, exc)) from exc
