"""ANSI color codes and color schemes

Only a fixed set of escape sequences is recognized: the reset code and the
16 foreground colors (8 normal and 8 bright variants). Background colors and
text attributes are known but unused: they are never mapped to a color.
"""
from collections import namedtuple

from PIL import ImageColor

RESET = '\x1b[0m'

BLACK = '\x1b[30m'
RED = '\x1b[31m'
GREEN = '\x1b[32m'
YELLOW = '\x1b[33m'
BLUE = '\x1b[34m'
MAGENTA = '\x1b[35m'
CYAN = '\x1b[36m'
WHITE = '\x1b[37m'

BRIGHT_BLACK = '\x1b[90m'
BRIGHT_RED = '\x1b[91m'
BRIGHT_GREEN = '\x1b[92m'
BRIGHT_YELLOW = '\x1b[93m'
BRIGHT_BLUE = '\x1b[94m'
BRIGHT_MAGENTA = '\x1b[95m'
BRIGHT_CYAN = '\x1b[96m'
BRIGHT_WHITE = '\x1b[97m'

BOLD = '\x1b[1m'
UNDERLINE = '\x1b[4m'
REVERSED = '\x1b[7m'

# Palette order: color0 to color7, then color8 to color15
FOREGROUND_CODES = [BLACK, RED, GREEN, YELLOW, BLUE, MAGENTA, CYAN, WHITE,
                    BRIGHT_BLACK, BRIGHT_RED, BRIGHT_GREEN, BRIGHT_YELLOW,
                    BRIGHT_BLUE, BRIGHT_MAGENTA, BRIGHT_CYAN, BRIGHT_WHITE]

UNUSED_CODES = frozenset(
    ['\x1b[{}m'.format(n) for n in range(40, 48)] +
    ['\x1b[{}m'.format(n) for n in range(100, 108)] +
    [BOLD, UNDERLINE, REVERSED]
)


class ColorSchemeError(Exception):
    pass


_ColorScheme = namedtuple('_ColorScheme', ['name', 'background', 'foreground',
                                           'palette'])


class ColorScheme(_ColorScheme):
    """Colors used to render the terminal

    name: Name of the scheme
    background: Background color of the terminal window
    foreground: Default text color, also used for the reset code
    palette: Tuple of 8 or 16 colors matching FOREGROUND_CODES in order

    Colors may use any notation understood by Pillow ('#rrggbb',
    'rgb(r, g, b)'...)
    """
    def __new__(cls, name, background, foreground, palette):
        palette = tuple(palette)
        if len(palette) not in (8, 16):
            raise ColorSchemeError('Invalid palette for scheme "{}": expected 8 '
                                   'or 16 colors, got {}'.format(name, len(palette)))
        for color in (background, foreground) + palette:
            if not cls.is_color(color):
                raise ColorSchemeError('Invalid color for scheme "{}": {}'
                                       .format(name, color))
        return super().__new__(cls, name, background, foreground, palette)

    @staticmethod
    def is_color(color):
        if not isinstance(color, str):
            return False
        try:
            ImageColor.getrgb(color)
        except ValueError:
            return False
        return True

    @property
    def colors(self):
        """Mapping between recognized escape codes and colors"""
        mapping = {RESET: self.foreground}
        mapping.update(zip(FOREGROUND_CODES, self.palette))
        return mapping
