"""Rendering of terminal frames as PNG images and assembly of the GIF

Frames are drawn with Pillow on a canvas made of a background (image or flat
color) and a window mimicking a macOS terminal. The GIF is then produced by
ffmpeg from the numbered frame files.
"""
import glob
import io
import logging
import os
import subprocess

from PIL import Image, ImageDraw, ImageFilter, ImageFont
from wcwidth import wcswidth

from termtogif import term

logger = logging.getLogger(__name__)

# Space between the edges of the canvas and the window
MARGIN = 40

BUTTON_RADIUS = 8
BUTTON_SPACING = 12
BUTTON_GAP = BUTTON_SPACING + BUTTON_RADIUS * 2
# Position of the center of the first button relative to the window
BUTTONS_OFFSET = 20 + BUTTON_RADIUS

# Space between the edges of the window and the area holding text
Y_PADDING = BUTTONS_OFFSET + 25
X_PADDING = BUTTONS_OFFSET - 15

# Position of the first character relative to the text area
TEXT_OFFSET = 10

WINDOW_RADIUS = 20
SHADOW_COLOR = (0, 0, 0, 102)
SHADOW_BLUR = 6

MACOS_COLORS = {
    'close': '#FF5F58',
    'minimize': '#FFBD2E',
    'maximize': '#18C132',
}
DESKTOP_COLOR = '#D9DCE1'

DEFAULT_FONT = 'SF Mono'
DEFAULT_FONT_SIZE = 22
DEFAULT_LINE_HEIGHT = 24
DEFAULT_WINDOW_SIZE = (1300, 800)

FRAME_FILENAME = 'frame-{}.png'
FRAME_PATTERN = 'frame-%d.png'

GIF_FILTER = 'split[s0][s1];[s0]palettegen[p];[s1][p]paletteuse'


class EncoderError(Exception):
    pass


class CellMeasure:
    """Width of strings drawn with a monospace font

    Like in a terminal, every character occupies one or two cells depending on
    its East Asian width. Strings holding non-printable characters are
    measured with the font itself.
    """
    def __init__(self, font):
        self.font = font
        self.cell_width = font.getlength('M')

    def __call__(self, text):
        cells = wcswidth(text)
        if cells < 0:
            return self.font.getlength(text)
        return cells * self.cell_width


class FrameRenderer:
    """Draw the content of a terminal in a window

    :param scheme: Color scheme (instance of ColorScheme)
    :param font: Font family or path to a font file
    :param font_size: Default font size in pixels
    :param line_height: Line height in pixels for the default font size
    :param window_size: Size (width, height) of the text area of the window
    :param background_image: Optional path to an image drawn behind the window
    """
    def __init__(self, scheme, font=DEFAULT_FONT, font_size=DEFAULT_FONT_SIZE,
                 line_height=DEFAULT_LINE_HEIGHT, window_size=DEFAULT_WINDOW_SIZE,
                 background_image=None):
        self.scheme = scheme
        self.font = font
        self.font_size = font_size
        self.line_height = line_height

        text_width, text_height = window_size
        self.window_width = text_width + 2 * X_PADDING
        self.window_height = text_height + 2 * Y_PADDING
        self.size = (self.window_width + 2 * MARGIN,
                     self.window_height + 2 * MARGIN)
        self.origin = (MARGIN + X_PADDING + TEXT_OFFSET,
                       MARGIN + Y_PADDING + TEXT_OFFSET)

        self._fonts = {}
        self._font_missing = False
        self._font(font_size)
        self._background = self._render_background(background_image)

    def _font(self, size):
        """Return the font of `size` pixels and its measure

        Pillow's default font replaces a font that can't be found.
        """
        if size not in self._fonts:
            if self._font_missing:
                font = ImageFont.load_default(size)
            else:
                try:
                    font = ImageFont.truetype(self.font, size)
                except OSError:
                    logger.warning('Font "{}" not found, using default font'
                                   .format(self.font))
                    self._font_missing = True
                    font = ImageFont.load_default(size)
            self._fonts[size] = (font, CellMeasure(font))
        return self._fonts[size]

    def _render_background(self, background_image):
        """Return the canvas with everything but text"""
        if background_image is None:
            canvas = Image.new('RGBA', self.size, DESKTOP_COLOR)
        else:
            with Image.open(background_image) as image:
                canvas = image.convert('RGBA').resize(self.size)

        window_box = [MARGIN, MARGIN, MARGIN + self.window_width,
                      MARGIN + self.window_height]

        shadow = Image.new('RGBA', self.size, (0, 0, 0, 0))
        ImageDraw.Draw(shadow).rounded_rectangle(window_box, WINDOW_RADIUS,
                                                 fill=SHADOW_COLOR)
        shadow = shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR))
        canvas = Image.alpha_composite(canvas, shadow)

        draw = ImageDraw.Draw(canvas)
        draw.rounded_rectangle(window_box, WINDOW_RADIUS,
                               fill=self.scheme.background)

        center_y = MARGIN + BUTTONS_OFFSET
        for i, name in enumerate(['close', 'minimize', 'maximize']):
            center_x = MARGIN + BUTTONS_OFFSET + i * BUTTON_GAP
            draw.ellipse([center_x - BUTTON_RADIUS, center_y - BUTTON_RADIUS,
                          center_x + BUTTON_RADIUS, center_y + BUTTON_RADIUS],
                         fill=MACOS_COLORS[name])

        return canvas.convert('RGB')

    def render(self, tokens, font_size=None):
        """Return an image of the terminal displaying `tokens`"""
        if font_size is None:
            font_size, line_height = self.font_size, self.line_height
        else:
            line_height = font_size + 2
        font, measure = self._font(font_size)

        image = self._background.copy()
        draw = ImageDraw.Draw(image)
        positions = term.layout(tokens, self.origin, line_height, measure,
                                self.scheme.foreground)
        for x, y, color, text in positions:
            draw.text((x, y), text, fill=color, font=font)

        return image


def write_frames(frames, directory, renderer, callback=None):
    """Write each frame as a PNG file in `directory` and return the number of
    frames written

    Files are named frame-0.png, frame-1.png... in the order of the frames.
    Frames of the HOLD phase reuse the image of the previous frame.

    :param callback: Optional callable called with the number of frames
    written after each frame
    """
    data = None
    count = 0
    for frame in frames:
        if frame.phase != term.HOLD or data is None:
            image = renderer.render(frame.tokens, frame.font_size)
            with io.BytesIO() as buffer:
                image.save(buffer, format='PNG')
                data = buffer.getvalue()

        filename = os.path.join(directory, FRAME_FILENAME.format(count))
        with open(filename, 'wb') as frame_file:
            frame_file.write(data)
        count += 1
        if callback is not None:
            callback(count)

    return count


def delete_frames(directory):
    """Remove frame files from `directory`"""
    for filename in glob.glob(os.path.join(directory, 'frame-*.png')):
        os.remove(filename)


def encode_gif(directory, fps, output_path, ffmpeg='ffmpeg'):
    """Assemble frame files into a looping GIF animation with ffmpeg

    Raise EncoderError if ffmpeg can't be run or fails.
    """
    args = [
        ffmpeg,
        '-y',
        '-framerate', str(fps),
        '-i', os.path.join(directory, FRAME_PATTERN),
        '-vf', GIF_FILTER,
        output_path,
        '-hide_banner', '-loglevel', 'error', '-stats',
    ]
    logger.debug('Running encoder: {}'.format(' '.join(args)))
    try:
        subprocess.run(args, stdin=subprocess.DEVNULL, check=True)
    except subprocess.CalledProcessError as exc:
        raise EncoderError('{} exited with status {}'
                           .format(ffmpeg, exc.returncode)) from exc
    except OSError as exc:
        raise EncoderError('Cannot run {}: {}'.format(ffmpeg, exc)) from exc
