"""Command line interface of termtogif"""

import argparse
import logging
import os
import shlex
import sys
import tempfile

import termtogif.anim
import termtogif.config

logger = logging.getLogger('termtogif')

USAGE = """termtogif script_file [output_path] [-i INTERPRETER] [-r FPS]
                 [-s SCHEME] [-f FONT] [-S FONT_SIZE] [-p PROMPT] [-b IMAGE]
                 [-g SIZE] [-d FRAMES_DIR] [-k] [-v] [-h]

Render the commands of a script typed in a terminal as a GIF animation
"""
EPILOG = ('The script lists one command per line in JSON format, for example '
          '{"text": "1 + 2 * 3", "delay": 5}')

BAR_WIDTH = 80


def positive_integer(value):
    if value.isdigit() and int(value) >= 1:
        return int(value)
    raise ValueError('value must be an integer greater than 0')


def non_empty_string(value):
    if value:
        return value
    raise ValueError('value must not be empty')


def parse(args, schemes, global_options):
    """Parse command line arguments

    :param args: Arguments to parse
    :param schemes: Mapping between color scheme names and color schemes
    :param global_options: Global options of the configuration, used as
    default values
    :return: Parsed arguments
    """
    parser = argparse.ArgumentParser(prog='termtogif', usage=USAGE, epilog=EPILOG)
    parser.add_argument(
        'script_file',
        help='script of the commands to type in the terminal'
    )
    parser.add_argument(
        'output_path',
        nargs='?',
        help='optional filename of the GIF animation. If missing, a random '
             'filename will be automatically generated.',
    )
    parser.add_argument(
        '-i', '--interpreter',
        help=('command line of the interpreter evaluating the commands '
              '(default: ${} or "interpreter" in the configuration file)'
              .format(termtogif.config.INTERPRETER_ENV_VAR)),
        metavar='INTERPRETER'
    )
    parser.add_argument(
        '-r', '--fps',
        type=positive_integer,
        default=global_options['fps'],
        help='number of frames per second (default: {})'.format(global_options['fps']),
        metavar='FPS'
    )
    parser.add_argument(
        '-s', '--scheme',
        help='color scheme used for rendering ({}) (default: {})'.format(
            ', '.join(schemes), global_options['scheme']),
        type=str.lower,
        choices=list(schemes),
        default=global_options['scheme'].lower(),
        metavar='SCHEME'
    )
    parser.add_argument(
        '-f', '--font',
        help='font family or path to a TrueType font (default: {})'
             .format(global_options['font']),
        default=global_options['font'],
        metavar='FONT'
    )
    parser.add_argument(
        '-S', '--font-size',
        type=positive_integer,
        help='font size in pixels (default: {})'.format(global_options['font-size']),
        metavar='FONT_SIZE'
    )
    parser.add_argument(
        '-p', '--prompt',
        type=non_empty_string,
        help='text displayed at the beginning of each prompt line '
             '(default: "{}")'.format(global_options['prompt']),
        default=global_options['prompt'],
        metavar='PROMPT'
    )
    parser.add_argument(
        '-b', '--background-image',
        help='image drawn behind the terminal window',
        default=global_options['background-image'],
        metavar='IMAGE'
    )
    parser.add_argument(
        '-g', '--window-size',
        help='size of the text area of the window given as the width and the '
             'height in pixels separated by the character "x" (default: {}x{})'
             .format(*global_options['window-size']),
        type=termtogif.config.validate_geometry,
        default=global_options['window-size'],
        metavar='SIZE'
    )
    parser.add_argument(
        '-d', '--frames-dir',
        help='directory where frames are written. If missing, a temporary '
             'directory is used.',
        metavar='FRAMES_DIR'
    )
    parser.add_argument(
        '-k', '--keep-frames',
        action='store_true',
        help='do not delete frames once the animation is rendered'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='increase log messages verbosity'
    )
    return parser.parse_args(args)


class ProgressBar:
    """Progress bar updated in place on a terminal

    Example: ' 12.50% [==========          ] ( 25 / 200)'
    """
    def __init__(self, total, stream, width=BAR_WIDTH):
        self.total = total
        self.stream = stream
        self.width = width

    def format(self, count):
        ratio = count / self.total if self.total else 1.0
        filled = int(ratio * self.width)
        return '{:6.2f}% [{}{}] ({:>{digits}} / {})'.format(
            100 * ratio,
            '=' * filled,
            ' ' * (self.width - filled),
            count,
            self.total,
            digits=len(str(self.total))
        )

    def update(self, count):
        self.stream.write('\r' + self.format(count))
        self.stream.flush()

    def close(self):
        # Erase the bar
        self.stream.write('\x1b[2K\r')
        self.stream.flush()


def format_size(size):
    """Return a human readable file size"""
    for unit in ['B', 'kB', 'MB', 'GB']:
        if size < 1000 or unit == 'GB':
            break
        size /= 1000
    if unit == 'B':
        return '{} {}'.format(int(size), unit)
    return '{:.1f} {}'.format(size, unit)


def render_subcommand(commands, interpreter, scheme, renderer, fps, prompt,
                      frames_dir, output_path):
    """Evaluate commands, render frames and assemble them into a GIF"""
    from termtogif.ansi import parse_output, reset_color
    from termtogif.term import count_frames, generate_frames

    logger.info('Evaluating {} commands'.format(len(commands)))
    outputs = interpreter.evaluate([command.text for command in commands])
    colors = scheme.colors
    # Prompts are drawn in the default color whatever the output left active
    token_sequences = [reset_color(parse_output(output, colors), scheme.foreground)
                       for output in outputs]

    termtogif.anim.delete_frames(frames_dir)
    frames = generate_frames(commands, token_sequences, fps, prompt)
    progress_bar = ProgressBar(count_frames(commands, fps), sys.stderr)

    logger.info('Rendering frames')
    try:
        frame_count = termtogif.anim.write_frames(frames, frames_dir, renderer,
                                                  progress_bar.update)
    finally:
        progress_bar.close()
    logger.info('Rendered {} frames in {}'.format(frame_count, frames_dir))

    logger.info('Encoding GIF')
    termtogif.anim.encode_gif(frames_dir, fps, output_path)

    size = os.path.getsize(output_path)
    logger.info('Rendering ended, GIF animation is {} ({})'
                .format(output_path, format_size(size)))


def _run(args, environ):
    from termtogif.repl import SubprocessInterpreter
    from termtogif.script import read_commands

    configuration = termtogif.config.init_read_conf()
    global_options = configuration['GLOBAL']
    schemes = termtogif.config.color_schemes(configuration)
    args = parse(args, schemes, global_options)

    if args.verbose:
        _, log_filename = tempfile.mkstemp(prefix='termtogif_', suffix='.log')
        file_handler = logging.FileHandler(filename=log_filename, mode='w')
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        file_handler.setFormatter(file_formatter)
        logger.handlers.append(file_handler)
        logger.setLevel(logging.DEBUG)
        logger.info('Logging to {}'.format(log_filename))

    interpreter_cmd = termtogif.config.interpreter_command(args.interpreter,
                                                           global_options,
                                                           environ)
    interpreter = SubprocessInterpreter(shlex.split(interpreter_cmd),
                                        global_options['end-marker'])
    commands = read_commands(args.script_file)

    if args.font_size is None:
        font_size = global_options['font-size']
        line_height = global_options['line-height']
    else:
        font_size = args.font_size
        line_height = args.font_size + 2

    scheme = schemes[args.scheme]
    try:
        renderer = termtogif.anim.FrameRenderer(scheme,
                                                font=args.font,
                                                font_size=font_size,
                                                line_height=line_height,
                                                window_size=args.window_size,
                                                background_image=args.background_image)
    except OSError as exc:
        raise termtogif.config.ConfigError('Cannot read background image "{}": {}'
                                           .format(args.background_image, exc)) from exc

    if args.output_path is None:
        _, output_path = tempfile.mkstemp(prefix='termtogif_', suffix='.gif')
    else:
        output_path = args.output_path

    if args.frames_dir is None:
        frames_dir = tempfile.mkdtemp(prefix='termtogif_')
    else:
        frames_dir = args.frames_dir
        os.makedirs(frames_dir, exist_ok=True)

    try:
        render_subcommand(commands, interpreter, scheme, renderer, args.fps,
                          args.prompt, frames_dir, output_path)
    except Exception:
        if args.output_path is None:
            os.remove(output_path)
        raise
    finally:
        if not args.keep_frames:
            logger.info('Deleting intermediate files')
            termtogif.anim.delete_frames(frames_dir)
            if args.frames_dir is None:
                os.rmdir(frames_dir)


def main(args=None, environ=None):
    from termtogif.anim import EncoderError
    from termtogif.config import ConfigError
    from termtogif.repl import InterpreterError
    from termtogif.script import ScriptError

    if args is None:
        args = sys.argv
    if environ is None:
        environ = os.environ

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter('%(message)s')
    console_handler.setFormatter(console_formatter)
    logger.handlers = [console_handler]
    logger.setLevel(logging.INFO)

    failed_steps = [
        (ConfigError, 'Configuration'),
        (ScriptError, 'Reading script'),
        (InterpreterError, 'Interpreter'),
        (EncoderError, 'GIF encoding'),
    ]
    try:
        _run(args[1:], environ)
    except tuple(error for error, _ in failed_steps) as exc:
        step = next(name for error, name in failed_steps if isinstance(exc, error))
        logger.error('{} failed: {}'.format(step, exc))
        sys.exit(1)
    finally:
        for handler in logger.handlers:
            handler.close()
