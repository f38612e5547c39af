import configparser
import logging
import os
import pkgutil
from collections.abc import MutableMapping

from termtogif.colors import ColorScheme, ColorSchemeError

logger = logging.getLogger(__name__)

PKG_CONF_PATH = 'data/termtogif.ini'
USER_CONF_DIR = 'termtogif'
USER_CONF_FILENAME = 'termtogif.ini'

INTERPRETER_ENV_VAR = 'TERMTOGIF_INTERPRETER'

_INTEGER_OPTIONS = ['font-size', 'line-height', 'fps']
_STRING_OPTIONS = ['scheme', 'font', 'prompt', 'end-marker']
_OPTIONAL_OPTIONS = ['interpreter', 'background-image']


class ConfigError(Exception):
    pass


class CaseInsensitiveDict(MutableMapping):
    """Dictionary whose string keys are compared without regard to case"""
    def __init__(self, *args, **kwargs):
        self._dict = {}
        self.update(*args, **kwargs)

    def __setitem__(self, key, value):
        self._dict[key.lower()] = value

    def __getitem__(self, key):
        return self._dict[key.lower()]

    def __delitem__(self, key):
        del self._dict[key.lower()]

    def __iter__(self):
        return iter(self._dict)

    def __len__(self):
        return len(self._dict)

    def __eq__(self, other):
        if isinstance(other, CaseInsensitiveDict):
            return self._dict == other._dict
        return NotImplemented

    def __repr__(self):
        return 'CaseInsensitiveDict({!r})'.format(self._dict)


def validate_geometry(geometry):
    """Raise ValueError if 'geometry' does not conform to <integer>x<integer> format"""
    width, height = [int(value) for value in geometry.lower().split('x')]
    if width <= 0 or height <= 0:
        raise ValueError('Invalid geometry: "{}"'.format(geometry))
    return width, height


def _unquote(value):
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


def _parse_global_section(section):
    global_options = CaseInsensitiveDict()
    for option in _STRING_OPTIONS:
        try:
            global_options[option] = _unquote(section[option])
        except KeyError as exc:
            raise ConfigError('Missing option "{}" in GLOBAL section'
                              .format(option)) from exc
        if not global_options[option]:
            raise ConfigError('Invalid value for option "{}": expected a '
                              'non-empty string'.format(option))

    for option in _INTEGER_OPTIONS:
        try:
            value = int(section[option])
        except KeyError as exc:
            raise ConfigError('Missing option "{}" in GLOBAL section'
                              .format(option)) from exc
        except ValueError as exc:
            raise ConfigError('Invalid value for option "{}": expected an integer'
                              .format(option)) from exc
        if value <= 0:
            raise ConfigError('Invalid value for option "{}": expected a positive integer'
                              .format(option))
        global_options[option] = value

    try:
        global_options['window-size'] = validate_geometry(section['window-size'])
    except KeyError as exc:
        raise ConfigError('Missing option "window-size" in GLOBAL section') from exc
    except ValueError as exc:
        raise ConfigError('Invalid value for option "window-size": {}'
                          .format(section['window-size'])) from exc

    for option in _OPTIONAL_OPTIONS:
        value = section.get(option)
        global_options[option] = _unquote(value) if value else None

    return global_options


def _parse_scheme_section(name, section):
    palette = []
    for i in range(16):
        color = section.get('color{}'.format(i))
        if color is None:
            break
        palette.append(color)

    try:
        return ColorScheme(name, section['background'], section['foreground'],
                           palette)
    except KeyError as exc:
        raise ConfigError('Missing option {} in color scheme "{}"'
                          .format(exc, name)) from exc
    except ColorSchemeError as exc:
        raise ConfigError(str(exc)) from exc


def conf_to_dict(configuration):
    """Read a configuration string in INI format and return a dictionary

    The 'GLOBAL' key holds the dictionary of global options, every other key
    is the name of a color scheme mapped to an instance of ColorScheme.
    Raise ConfigError if the configuration is invalid.
    """
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(configuration)
    except configparser.Error as exc:
        raise ConfigError('Invalid configuration: {}'.format(exc)) from exc

    sections = CaseInsensitiveDict(
        (name, parser[name]) for name in parser.sections()
    )
    try:
        global_section = sections.pop('GLOBAL')
    except KeyError as exc:
        raise ConfigError('Missing GLOBAL section in configuration') from exc

    config_dict = CaseInsensitiveDict(GLOBAL=_parse_global_section(global_section))
    for name, section in sections.items():
        config_dict[name] = _parse_scheme_section(name, section)

    scheme = config_dict['GLOBAL']['scheme']
    if scheme.lower() not in config_dict or scheme.lower() == 'global':
        raise ConfigError('Color scheme "{}" is not defined'.format(scheme))

    return config_dict


def color_schemes(config_dict):
    """Return the mapping between names and color schemes of a configuration"""
    return CaseInsensitiveDict(
        (name, value) for name, value in config_dict.items() if name != 'global'
    )


def default_conf():
    return pkgutil.get_data(__name__, PKG_CONF_PATH).decode('utf-8')


def _user_conf_dir():
    try:
        return os.environ['XDG_CONFIG_HOME']
    except KeyError:
        pass

    try:
        return os.path.join(os.environ['HOME'], '.config')
    except KeyError:
        return None


def init_read_conf():
    """Return the configuration of the user as a dictionary

    The configuration file is created from the default configuration if it
    does not exist. If no configuration directory can be found, the default
    configuration is used.
    """
    config_dir = _user_conf_dir()
    if config_dir is None:
        logger.debug('No configuration directory, using default configuration')
        return conf_to_dict(default_conf())

    conf_path = os.path.join(config_dir, USER_CONF_DIR, USER_CONF_FILENAME)
    try:
        with open(conf_path, 'r', encoding='utf-8') as conf_file:
            configuration = conf_file.read()
    except FileNotFoundError:
        configuration = default_conf()
        os.makedirs(os.path.dirname(conf_path), exist_ok=True)
        with open(conf_path, 'w', encoding='utf-8') as conf_file:
            conf_file.write(configuration)
        logger.info('Created configuration file: {}'.format(conf_path))

    try:
        return conf_to_dict(configuration)
    except ConfigError as exc:
        raise ConfigError('{}: {}'.format(conf_path, exc)) from exc


def interpreter_command(cli_value, global_options, environ=None):
    """Return the interpreter command line

    The command line option takes precedence over the environment variable
    which itself takes precedence over the configuration file. Raise
    ConfigError if no interpreter is configured.
    """
    if environ is None:
        environ = os.environ

    for value in (cli_value, environ.get(INTERPRETER_ENV_VAR),
                  global_options['interpreter']):
        if value:
            return value

    raise ConfigError('No interpreter configured: use the --interpreter option, '
                      'the {} environment variable or the "interpreter" option '
                      'of the configuration file'.format(INTERPRETER_ENV_VAR))
