"""Terminal state and frame generation

The content of the terminal is a list of tokens representing everything
visible on screen. Each command goes through three phases:
    - typing: one frame per character typed at the prompt
    - reveal: a single frame where the whole output of the command appears
    - hold: the reveal frame is repeated during the delay of the command

Frames must be produced in order since each one depends on all the tokens
accumulated before it.
"""
from collections import namedtuple

from termtogif.ansi import Newline, Text, Token

DEFAULT_PROMPT = '> '

TYPING = 'typing'
REVEAL = 'reveal'
HOLD = 'hold'

Frame = namedtuple('Frame', ['phase', 'command_index', 'tokens', 'font_size'])
Frame.__doc__ = 'Content of the terminal for a single frame of the animation'
Frame.phase.__doc__ = 'Phase of the command which produced the frame (TYPING, REVEAL or HOLD)'
Frame.command_index.__doc__ = 'Index of the command in the script'
Frame.tokens.__doc__ = 'Tuple of the tokens visible on screen'
Frame.font_size.__doc__ = 'Font size requested by the command or None for the default'


class TerminalState:
    """Tokens visible on the screen of the terminal

    The last token is always the Text token of the prompt line currently
    being typed.
    """
    def __init__(self, prompt=DEFAULT_PROMPT):
        if not prompt:
            raise ValueError('The prompt must not be empty')
        self.prompt = prompt
        self.tokens = [Text(prompt)]

    def clear(self):
        self.tokens = [Text(self.prompt)]

    def type_character(self, char):
        self.tokens[-1] = Text(self.tokens[-1].value + char)

    def reveal(self, output_tokens):
        """Display the output of the command and a new prompt"""
        self.tokens.append(Newline())
        self.tokens.extend(output_tokens)
        self.tokens.append(Text(self.prompt))

    def snapshot(self):
        return tuple(self.tokens)


def delay_frames(delay, fps):
    """Number of frames needed to hold a frame for `delay` seconds"""
    return int(round(delay * fps))


def count_frames(commands, fps):
    """Total number of frames generated for the commands"""
    return sum(len(command.text) + 1 + delay_frames(command.delay, fps)
               for command in commands)


def generate_frames(commands, outputs, fps, prompt=DEFAULT_PROMPT):
    """Yield the frames of the animation

    :param commands: List of commands typed in the terminal
    :param outputs: List of token sequences, one per command
    :param fps: Number of frames per second of the animation
    :param prompt: Text displayed at the beginning of each prompt line
    """
    if len(commands) != len(outputs):
        raise ValueError('Got {} outputs for {} commands'
                         .format(len(outputs), len(commands)))

    state = TerminalState(prompt)
    for index, (command, output) in enumerate(zip(commands, outputs)):
        if command.clear:
            state.clear()

        for char in command.text:
            state.type_character(char)
            yield Frame(TYPING, index, state.snapshot(), command.font_size)

        state.reveal(output)
        reveal_frame = Frame(REVEAL, index, state.snapshot(), command.font_size)
        yield reveal_frame

        hold_frame = reveal_frame._replace(phase=HOLD)
        for _ in range(delay_frames(command.delay, fps)):
            yield hold_frame


def layout(tokens, origin, line_height, measure, color=None):
    """Yield the position and color of every text run of `tokens`

    Text advances the cursor horizontally by the width of its value, Newline
    moves the cursor back to the left of the origin one line lower and
    ColorChange only changes the color of the following text runs.

    :param tokens: Sequence of tokens
    :param origin: Coordinates (x, y) of the first character
    :param line_height: Height of a line in pixels
    :param measure: Callable returning the width of a string in pixels
    :param color: Color of text preceding the first ColorChange
    :return: Generator of tuples (x, y, color, text)
    """
    x, y = origin
    for token in tokens:
        if token.kind == Token.TEXT:
            yield x, y, color, token.value
            x += measure(token.value)
        elif token.kind == Token.NEWLINE:
            x = origin[0]
            y += line_height
        elif token.kind == Token.COLOR:
            color = token.value


def cursor_position(tokens, origin, line_height, measure):
    """Return the position of the cursor after drawing all tokens"""
    x, y = origin
    for token in tokens:
        if token.kind == Token.TEXT:
            x += measure(token.value)
        elif token.kind == Token.NEWLINE:
            x, y = origin[0], y + line_height
    return x, y

