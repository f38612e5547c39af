import unittest

from termtogif import term
from termtogif.ansi import ColorChange, Newline, Text
from termtogif.script import Command


def measure(text):
    return 10 * len(text)


class TestTerminalState(unittest.TestCase):
    def test_initial_state(self):
        state = term.TerminalState('$ ')
        self.assertEqual(state.tokens, [Text('$ ')])

    def test_empty_prompt(self):
        with self.assertRaises(ValueError):
            term.TerminalState('')

    def test_type_character(self):
        state = term.TerminalState()
        for char in '1+1':
            state.type_character(char)
        self.assertEqual(state.tokens, [Text('> 1+1')])

    def test_reveal(self):
        state = term.TerminalState()
        for char in '1+1':
            state.type_character(char)
        state.reveal([ColorChange('#FFFF00'), Text('2'), Newline()])
        self.assertEqual(state.tokens, [
            Text('> 1+1'),
            Newline(),
            ColorChange('#FFFF00'),
            Text('2'),
            Newline(),
            Text('> '),
        ])

    def test_reveal_empty_output(self):
        state = term.TerminalState()
        state.type_character('x')
        state.reveal([])
        self.assertEqual(state.tokens, [Text('> x'), Newline(), Text('> ')])

    def test_clear(self):
        state = term.TerminalState()
        state.type_character('x')
        state.reveal([Text('y')])
        state.clear()
        self.assertEqual(state.tokens, [Text('> ')])

    def test_snapshot_is_immutable_copy(self):
        state = term.TerminalState()
        snapshot = state.snapshot()
        state.type_character('a')
        self.assertEqual(snapshot, (Text('> '),))
        self.assertIsInstance(snapshot, tuple)


class TestFrames(unittest.TestCase):
    def test_delay_frames(self):
        test_cases = [
            ((5, 18), 90),
            ((0, 18), 0),
            ((2.5, 10), 25),
            ((0.7, 10), 7),
            ((0.29, 100), 29),
        ]
        for (delay, fps), expected in test_cases:
            with self.subTest(case=(delay, fps)):
                self.assertEqual(term.delay_frames(delay, fps), expected)

    def test_generate_frames_phases(self):
        commands = [Command('1+1', 2), Command('2+2', 1)]
        outputs = [[Text('2'), Newline()], [Text('4'), Newline()]]
        frames = list(term.generate_frames(commands, outputs, fps=3))

        self.assertEqual(len(frames), term.count_frames(commands, 3))
        phases = [(frame.command_index, frame.phase) for frame in frames]
        expected_phases = (
            [(0, term.TYPING)] * 3 + [(0, term.REVEAL)] + [(0, term.HOLD)] * 6 +
            [(1, term.TYPING)] * 3 + [(1, term.REVEAL)] + [(1, term.HOLD)] * 3
        )
        self.assertEqual(phases, expected_phases)

    def test_generate_frames_content(self):
        commands = [Command('ab', 1)]
        outputs = [[Text('ok')]]
        frames = list(term.generate_frames(commands, outputs, fps=2, prompt='$ '))

        self.assertEqual([frame.tokens for frame in frames], [
            (Text('$ a'),),
            (Text('$ ab'),),
            (Text('$ ab'), Newline(), Text('ok'), Text('$ ')),
            (Text('$ ab'), Newline(), Text('ok'), Text('$ ')),
            (Text('$ ab'), Newline(), Text('ok'), Text('$ ')),
        ])

    def test_generate_frames_accumulates(self):
        commands = [Command('a', 0), Command('b', 0)]
        outputs = [[Text('1'), Newline()], [Text('2'), Newline()]]
        frames = list(term.generate_frames(commands, outputs, fps=10))

        self.assertEqual(frames[-1].tokens, (
            Text('> a'), Newline(), Text('1'), Newline(),
            Text('> b'), Newline(), Text('2'), Newline(),
            Text('> '),
        ))

    def test_generate_frames_clear(self):
        commands = [Command('a', 0), Command('b', 0, clear=True)]
        outputs = [[Text('1')], [Text('2')]]
        frames = list(term.generate_frames(commands, outputs, fps=10))

        self.assertEqual(frames[2].tokens, (Text('> b'),))
        self.assertEqual(frames[-1].tokens,
                         (Text('> b'), Newline(), Text('2'), Text('> ')))

    def test_generate_frames_typing_count(self):
        for text in ['x', '1 + 2 * 3', "('Hello' + 'world').slice(3, 9)"]:
            with self.subTest(case=text):
                frames = term.generate_frames([Command(text, 0)], [[]], fps=18)
                typing = [f for f in frames if f.phase == term.TYPING]
                self.assertEqual(len(typing), len(text))

    def test_generate_frames_font_size(self):
        commands = [Command('a', 0, font_size=30), Command('b', 0)]
        frames = list(term.generate_frames(commands, [[], []], fps=10))
        self.assertEqual([frame.font_size for frame in frames], [30, 30, None, None])

    def test_generate_frames_mismatch(self):
        with self.assertRaises(ValueError):
            list(term.generate_frames([Command('a', 1)], [], fps=10))

    def test_count_frames(self):
        commands = [Command('1 + 2 * 3', 5), Command('cubes', 3)]
        self.assertEqual(term.count_frames(commands, 18),
                         (9 + 1 + 90) + (5 + 1 + 54))


class TestLayout(unittest.TestCase):
    def test_layout(self):
        tokens = [
            Text('> 1+1'),
            Newline(),
            ColorChange('#FF0000'),
            Text('2'),
            Text('34'),
            Newline(),
            ColorChange('#FFFFFF'),
            Text('> '),
        ]
        positions = list(term.layout(tokens, (5, 7), 20, measure, '#000000'))
        self.assertEqual(positions, [
            (5, 7, '#000000', '> 1+1'),
            (5, 27, '#FF0000', '2'),
            (15, 27, '#FF0000', '34'),
            (5, 47, '#FFFFFF', '> '),
        ])

    def test_layout_is_repeatable(self):
        tokens = [Text('a'), Newline(), Text('b')]
        first = list(term.layout(tokens, (0, 0), 10, measure))
        second = list(term.layout(tokens, (0, 0), 10, measure))
        self.assertEqual(first, second)
        self.assertEqual(tokens, [Text('a'), Newline(), Text('b')])

    def test_cursor_position(self):
        test_cases = [
            ([], (3, 4)),
            ([Text('abc')], (33, 4)),
            ([Text('abc'), Newline()], (3, 24)),
            ([Text('abc'), ColorChange('#000000'), Text('d')], (43, 4)),
            ([Newline(), Newline(), Text('x')], (13, 44)),
        ]
        for tokens, expected in test_cases:
            with self.subTest(case=tokens):
                self.assertEqual(term.cursor_position(tokens, (3, 4), 20, measure),
                                 expected)
