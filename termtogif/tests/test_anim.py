import os
import subprocess
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from PIL import Image, ImageColor

from termtogif import anim, colors, term
from termtogif.ansi import ColorChange, Newline, Text
from termtogif.script import Command

SCHEME = colors.ColorScheme('test', '#102030', '#F0F0F0',
                            ['#FF0000'] * 16)
MISSING_FONT = 'termtogif-missing-font'


def renderer(**kwargs):
    return anim.FrameRenderer(SCHEME, font=MISSING_FONT, font_size=14,
                              line_height=16, window_size=(200, 100), **kwargs)


def fake_font(width=7):
    font = MagicMock()
    font.getlength.side_effect = lambda text: width * len(text)
    return font


class TestCellMeasure(unittest.TestCase):
    def test_measure(self):
        measure = anim.CellMeasure(fake_font())
        test_cases = [
            ('', 0),
            ('a', 7),
            ('> 1 + 2', 49),
            ('日本', 28),
            ('\x1b[1m', 28),
        ]
        self.assertEqual(measure.cell_width, 7)
        for text, expected in test_cases:
            with self.subTest(case=text):
                self.assertEqual(measure(text), expected)


class TestFrameRenderer(unittest.TestCase):
    def test_missing_font(self):
        with self.assertLogs('termtogif.anim', level='WARNING') as logs:
            frame_renderer = renderer()
            frame_renderer.render([Text('a')], font_size=30)
            frame_renderer.render([Text('a')], font_size=10)
        # Reported once, when the renderer is created
        self.assertEqual(len(logs.output), 1)
        self.assertIn(MISSING_FONT, logs.output[0])

    def test_geometry(self):
        frame_renderer = renderer()
        self.assertEqual(frame_renderer.window_width, 200 + 2 * anim.X_PADDING)
        self.assertEqual(frame_renderer.window_height, 100 + 2 * anim.Y_PADDING)
        self.assertEqual(frame_renderer.size,
                         (frame_renderer.window_width + 2 * anim.MARGIN,
                          frame_renderer.window_height + 2 * anim.MARGIN))
        self.assertEqual(frame_renderer.origin,
                         (anim.MARGIN + anim.X_PADDING + anim.TEXT_OFFSET,
                          anim.MARGIN + anim.Y_PADDING + anim.TEXT_OFFSET))

    def test_window(self):
        frame_renderer = renderer()
        image = frame_renderer.render([])
        self.assertEqual(image.size, frame_renderer.size)
        self.assertEqual(image.mode, 'RGB')

        # Desktop
        self.assertEqual(image.getpixel((2, 2)),
                         ImageColor.getrgb(anim.DESKTOP_COLOR))
        # Window
        bottom_center = (anim.MARGIN + frame_renderer.window_width // 2,
                         anim.MARGIN + frame_renderer.window_height - 10)
        self.assertEqual(image.getpixel(bottom_center),
                         ImageColor.getrgb(SCHEME.background))
        # Close button
        close_center = (anim.MARGIN + anim.BUTTONS_OFFSET,
                        anim.MARGIN + anim.BUTTONS_OFFSET)
        self.assertEqual(image.getpixel(close_center),
                         ImageColor.getrgb(anim.MACOS_COLORS['close']))

    def test_background_image(self):
        directory = tempfile.mkdtemp(prefix='termtogif_')
        filename = os.path.join(directory, 'background.png')
        Image.new('RGB', (10, 10), '#00FF00').save(filename)

        image = renderer(background_image=filename).render([])
        self.assertEqual(image.getpixel((2, 2)), (0, 255, 0))

    def test_render_text(self):
        frame_renderer = renderer()
        blank = frame_renderer.render([])
        image = frame_renderer.render([Text('> 1+1'), Newline(),
                                       ColorChange('#FF0000'), Text('2')])
        self.assertNotEqual(blank.tobytes(), image.tobytes())
        # Rendering does not modify the cached background
        self.assertEqual(blank.tobytes(), frame_renderer.render([]).tobytes())

    def test_render_font_size(self):
        frame_renderer = renderer()
        tokens = [Text('abc')]
        default = frame_renderer.render(tokens)
        larger = frame_renderer.render(tokens, font_size=30)
        self.assertEqual(default.size, larger.size)
        self.assertNotEqual(default.tobytes(), larger.tobytes())


class TestFrameFiles(unittest.TestCase):
    def test_write_frames(self):
        commands = [Command('ab', 1), Command('c', 0.5)]
        outputs = [[Text('ok'), Newline()], [ColorChange('#00FF00'), Text('!')]]
        frames = list(term.generate_frames(commands, outputs, fps=4))
        directory = tempfile.mkdtemp(prefix='termtogif_')

        counts = []
        count = anim.write_frames(frames, directory, renderer(), counts.append)

        expected_count = term.count_frames(commands, 4)
        self.assertEqual(count, expected_count)
        self.assertEqual(counts, list(range(1, expected_count + 1)))
        self.assertEqual(sorted(os.listdir(directory)),
                         sorted('frame-{}.png'.format(i) for i in range(count)))

        def read(index):
            with open(os.path.join(directory, 'frame-{}.png'.format(index)), 'rb') as f:
                return f.read()

        # frames 0 and 1: typing, 2: reveal, 3 to 6: hold
        self.assertNotEqual(read(0), read(1))
        for index in range(3, 7):
            with self.subTest(case=index):
                self.assertEqual(read(2), read(index))

        with Image.open(os.path.join(directory, 'frame-0.png')) as image:
            self.assertEqual(image.format, 'PNG')

    def test_delete_frames(self):
        directory = tempfile.mkdtemp(prefix='termtogif_')
        for filename in ['frame-0.png', 'frame-1.png', 'frame-12.png', 'notes.txt']:
            with open(os.path.join(directory, filename), 'wb'):
                pass

        anim.delete_frames(directory)
        self.assertEqual(os.listdir(directory), ['notes.txt'])


class TestEncodeGif(unittest.TestCase):
    def test_encode_gif(self):
        with patch('subprocess.run') as mock_run:
            anim.encode_gif('frames', 18, 'demo.gif')

        args, kwargs = mock_run.call_args
        command = args[0]
        self.assertEqual(command[0], 'ffmpeg')
        self.assertEqual(command[command.index('-framerate') + 1], '18')
        self.assertEqual(command[command.index('-i') + 1],
                         os.path.join('frames', 'frame-%d.png'))
        self.assertEqual(command[command.index('-vf') + 1], anim.GIF_FILTER)
        self.assertIn('demo.gif', command)
        self.assertTrue(kwargs['check'])

    def test_encode_gif_failure(self):
        errors = [
            subprocess.CalledProcessError(1, ['ffmpeg']),
            FileNotFoundError(2, 'No such file or directory'),
        ]
        for error in errors:
            with self.subTest(case=error):
                with patch('subprocess.run', side_effect=error):
                    with self.assertRaises(anim.EncoderError) as context:
                        anim.encode_gif('frames', 18, 'demo.gif')
                self.assertIs(context.exception.__cause__, error)
