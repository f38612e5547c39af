"""Evaluation of commands by an external interpreter

All commands are sent at once to a single interpreter process. The
interpreter is expected to print an end-of-record marker between the outputs
of two consecutive commands so that the combined output can be split back
into one output per command.
"""
import abc
import logging
import subprocess

from termtogif.ansi import RecordCountError, split_records

logger = logging.getLogger(__name__)

DEFAULT_END_MARKER = '#[END-OF-OUTPUT]#'


class InterpreterError(Exception):
    pass


class Interpreter(abc.ABC):
    """Evaluate a batch of commands"""
    @abc.abstractmethod
    def evaluate(self, sources):
        """Return the list of outputs of the commands, in order"""
        raise NotImplementedError


class SubprocessInterpreter(Interpreter):
    """Interpreter running as a subprocess reading commands on its standard
    input

    :param args: Arguments required to spawn the interpreter (list of string)
    :param marker: End-of-record marker printed by the interpreter between
    the outputs of two commands
    """
    def __init__(self, args, marker=DEFAULT_END_MARKER):
        if not args:
            raise ValueError('Missing interpreter command')
        self.args = list(args)
        self.marker = marker

    def run(self, stdin):
        """Run the interpreter and return its standard output

        Line endings are normalized to '\\n'. Raise InterpreterError if the
        process cannot be spawned or exits with a non-zero status.
        """
        logger.debug('Running interpreter: {}'.format(' '.join(self.args)))
        try:
            process = subprocess.run(self.args,
                                     input=stdin.encode('utf-8'),
                                     stdout=subprocess.PIPE,
                                     check=True)
        except subprocess.CalledProcessError as exc:
            raise InterpreterError('Interpreter "{}" exited with status {}'
                                   .format(self.args[0], exc.returncode)) from exc
        except OSError as exc:
            raise InterpreterError('Cannot run interpreter "{}": {}'
                                   .format(self.args[0], exc)) from exc

        stdout = process.stdout.decode('utf-8', 'replace')
        return stdout.replace('\r\n', '\n')

    def evaluate(self, sources):
        stdout = self.run('\n'.join(sources))
        logger.debug('Interpreter output: {!r}'.format(stdout))
        try:
            return split_records(stdout, self.marker, len(sources))
        except RecordCountError as exc:
            raise InterpreterError(str(exc)) from exc
