"""Tests for macro and define expansion.

Covers:
  - Invocation detection (boundary, first macro in merge order, one per line)
  - Argument binding, comma stripping and count validation
  - Expanded block shape (leading blank line, one line per body line)
  - Define expansion order and single-pass behaviour
"""

import unittest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from vclpp.directives import CodeLine, Constant, DirectiveSet, MacroDefinition
from vclpp.errors import InvocationError
from vclpp.expansion import (
    expand_defines, expand_invocation, expand_macro_body, expand_macros,
    find_invocation, invocation_arguments, strip_argument_commas,
)
from vclpp.includes import MergedContext


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def macros(*definitions: MacroDefinition) -> MergedContext:
    return MergedContext([DirectiveSet(macros=definitions)])


def constants(*pairs) -> MergedContext:
    return MergedContext([DirectiveSet(constants=tuple(Constant(n, v) for n, v in pairs))])


ADD = MacroDefinition('Add', ('dst', 'a', 'b'), ('add.xyz dst, a, b',))
CLEAR = MacroDefinition('Clear', (), ('sub.xyzw vf01, vf01, vf01', 'nop'))


# ---------------------------------------------------------------------------
# Invocation detection
# ---------------------------------------------------------------------------

class TestFindInvocation(unittest.TestCase):

    def test_finds_invocation(self):
        self.assertEqual(find_invocation('    Add{ vf01, vf02, vf03 }', macros(ADD)), (ADD, 4))

    def test_requires_brace(self):
        self.assertIsNone(find_invocation('Add vf01', macros(ADD)))

    def test_requires_left_boundary(self):
        self.assertIsNone(find_invocation('MyAdd{ a, b, c }', macros(ADD)))

    def test_later_occurrence_matches(self):
        line = 'AddMore Add{ a, b, c }'
        self.assertEqual(find_invocation(line, macros(ADD)), (ADD, 8))

    def test_first_macro_in_merge_order_wins(self):
        first = MacroDefinition('Clear', (), ('first',))
        second = MacroDefinition('Clear', (), ('second',))
        context = MergedContext([DirectiveSet(macros=(first,)), DirectiveSet(macros=(second,))])
        self.assertIs(find_invocation('Clear{}', context)[0], first)

    def test_scan_stops_at_first_macro(self):
        context = macros(CLEAR, ADD)
        self.assertIs(find_invocation('Add{ a, b, c } Clear{}', context)[0], CLEAR)


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

class TestArguments(unittest.TestCase):

    def test_spaced_form(self):
        self.assertEqual(invocation_arguments('Add{ vf01, vf02, vf03 }', ADD, 0),
                         ['vf01,', 'vf02,', 'vf03'])

    def test_compact_form(self):
        self.assertEqual(invocation_arguments('Add{vf01, vf02, vf03}', ADD, 0),
                         ['vf01,', 'vf02,', 'vf03'])

    def test_text_after_invocation_ignored(self):
        self.assertEqual(invocation_arguments('Clear{} ; reset it', CLEAR, 0), [])

    def test_too_few_arguments(self):
        macro = MacroDefinition('Three', ('a', 'b', 'c'), ('nop',))
        with self.assertRaises(InvocationError) as ctx:
            invocation_arguments('Three{ 1, 2 }', macro, 0, 'main.vcl', 7)
        message = str(ctx.exception)
        self.assertIn("'Three'", message)
        self.assertIn('takes 3 arguments, but 2 were provided', message)
        self.assertTrue(message.startswith('main.vcl:7: '))

    def test_arguments_to_parameterless_macro(self):
        with self.assertRaises(InvocationError) as ctx:
            invocation_arguments('Clear{ vf01 }', CLEAR, 0)
        self.assertIn('takes no arguments, but 1 were provided', str(ctx.exception))

    def test_missing_closing_brace(self):
        with self.assertRaises(InvocationError):
            invocation_arguments('Add{ a, b, c', ADD, 0)

    def test_strip_commas(self):
        self.assertEqual(strip_argument_commas('vf01,'), 'vf01')
        self.assertEqual(strip_argument_commas(',vf01'), 'vf01')
        self.assertEqual(strip_argument_commas(',,vf01,,'), ',vf01,')
        self.assertEqual(strip_argument_commas('vf01'), 'vf01')


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------

class TestMacroExpansion(unittest.TestCase):

    def test_parameterless_body_literal(self):
        self.assertEqual(expand_invocation('Clear{}', macros(CLEAR)),
                         '\nsub.xyzw vf01, vf01, vf01\nnop\n')

    def test_parameter_substitution(self):
        macro = MacroDefinition('Pair', ('a', 'b'), ('add a, b, a', 'mul.x b, a'))
        self.assertEqual(expand_invocation('Pair{1, 2}', macros(macro)),
                         '\nadd 1, 2, 1\nmul.x 2, 1\n')

    def test_parameter_boundary_respected(self):
        macro = MacroDefinition('M', ('a',), ('mad acc, a',))
        self.assertEqual(expand_macro_body(macro, ['vf09']), '\nmad acc, vf09\n')

    def test_empty_body(self):
        macro = MacroDefinition('Nothing')
        self.assertEqual(expand_invocation('Nothing{}', macros(macro)), '')

    def test_empty_body_still_checks_arguments(self):
        macro = MacroDefinition('Nothing', ('x',))
        with self.assertRaises(InvocationError):
            expand_invocation('Nothing{}', macros(macro))

    def test_no_invocation(self):
        self.assertIsNone(expand_invocation('nop', macros(CLEAR)))

    def test_expand_macros_keeps_other_lines(self):
        lines = [CodeLine(1, 'nop'), CodeLine(2, 'Add{ vf01, vf02, vf03 }'), CodeLine(3, 'iaddiu')]
        result = expand_macros(lines, macros(ADD), 'main.vcl')
        self.assertEqual(result, [
            CodeLine(1, 'nop'),
            CodeLine(2, '\nadd.xyz vf01, vf02, vf03\n'),
            CodeLine(3, 'iaddiu'),
        ])

    def test_expand_macros_reports_line(self):
        lines = [CodeLine(12, 'Add{ vf01 }')]
        with self.assertRaises(InvocationError) as ctx:
            expand_macros(lines, macros(ADD), 'main.vcl')
        self.assertEqual(ctx.exception.line, 12)
        self.assertEqual(ctx.exception.path, 'main.vcl')


class TestDefineExpansion(unittest.TestCase):

    def test_boundary_replacement(self):
        result = expand_defines([CodeLine(1, 'mul r, ANSWER, x')], constants(('ANSWER', '42')))
        self.assertEqual(result, [CodeLine(1, 'mul r, 42, x')])

    def test_substring_untouched(self):
        result = expand_defines([CodeLine(1, 'FOOBAR')], constants(('FOO', 'X')))
        self.assertEqual(result[0].text, 'FOOBAR')

    def test_first_definition_wins(self):
        context = MergedContext([
            DirectiveSet(constants=(Constant('V', 'include'),)),
            DirectiveSet(constants=(Constant('V', 'main'),)),
        ])
        self.assertEqual(expand_defines([CodeLine(1, 'V')], context)[0].text, 'include')

    def test_values_not_rescanned(self):
        context = constants(('A', 'B'), ('C', 'A'))
        self.assertEqual(expand_defines([CodeLine(1, 'C')], context)[0].text, 'A')

    def test_later_constant_sees_earlier_replacement(self):
        context = constants(('A', 'B'), ('B', 'Z'))
        self.assertEqual(expand_defines([CodeLine(1, 'A')], context)[0].text, 'Z')

    def test_expands_inside_macro_block(self):
        expanded = expand_macros([CodeLine(1, 'Clear{}')], macros(CLEAR))
        result = expand_defines(expanded, constants(('vf01', 'vf05')))
        self.assertEqual(result[0].text, '\nsub.xyzw vf05, vf05, vf05\nnop\n')


if __name__ == '__main__':
    unittest.main()
