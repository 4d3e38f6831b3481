"""
Tests for the call-seq parser: grammar, per-line recovery and the entry
meaning rules (merged optional arguments, block placeholders, receiver naming).
"""

import unittest

import pytest

from structural_parsing.call_seq import (
    BlockPlaceholderError, CallSeqParser, CallSeqSyntaxError,
)
from structural_parsing.call_seq.types import CALL, INDEX, INDEX_ASSIGN, OPERATOR, UNARY
from structural_parsing.types import Segment, Span


def span(line=1, column=1, offset=0):
    return Span(path='<test>', offset=offset, line=line, column=column)


class TestParseLine(unittest.TestCase):
    """Single entries."""

    def setUp(self):
        self.parser = CallSeqParser()

    def test_simple_call(self):
        entry = self.parser.parse_line("array.count -> integer", span())
        self.assertEqual(entry.receiver, "array")
        self.assertEqual(entry.method, "count")
        self.assertEqual(entry.args, ())
        self.assertIsNone(entry.block)
        self.assertEqual(entry.returns, ("integer",))
        self.assertEqual(entry.form, CALL)

    def test_arguments_with_defaults(self):
        entry = self.parser.parse_line("str.split(pattern = nil, limit = 0) -> array", span())
        self.assertEqual([a.name for a in entry.args], ["pattern", "limit"])
        self.assertEqual([a.default for a in entry.args], ["nil", "0"])

    def test_block_with_parameters(self):
        entry = self.parser.parse_line("hash.each_pair {|key, value| ... } -> self", span())
        self.assertEqual(entry.block.params, ("key", "value"))
        self.assertEqual(entry.returns, ("self",))

    def test_block_without_parameters(self):
        entry = self.parser.parse_line("loop { ... } -> object", span())
        self.assertEqual(entry.receiver, "")
        self.assertEqual(entry.block.params, ())

    def test_true_or_false_is_one_return_type(self):
        entry = self.parser.parse_line("obj.respond_to?(symbol) -> true or false", span())
        self.assertEqual(entry.method, "respond_to?")
        self.assertEqual(entry.returns, ("true or false",))

    def test_alternative_return_types(self):
        entry = self.parser.parse_line("array.first -> object or nil", span())
        self.assertEqual(entry.returns, ("object", "nil"))

    def test_comma_separated_return_types(self):
        entry = self.parser.parse_line("str.index(substring) -> integer, or nil", span())
        self.assertEqual(entry.returns, ("integer", "nil"))

    def test_unicode_arrow_and_hash_separator(self):
        entry = self.parser.parse_line("Array#count → integer", span())
        self.assertEqual((entry.receiver, entry.method), ("Array", "count"))
        self.assertEqual(entry.render(), "Array.count -> integer")

    def test_prefixed_and_keyword_arguments(self):
        entry = self.parser.parse_line("obj.public_send(name, *args, **opts, &block) -> object", span())
        self.assertEqual([a.prefix for a in entry.args], ["", "*", "**", "&"])
        entry = self.parser.parse_line("File.open(path, mode: 'r') -> file", span())
        self.assertTrue(entry.args[1].keyword)
        self.assertEqual(entry.args[1].default, "'r'")

    def test_omittable_group(self):
        entry = self.parser.parse_line("str.index(substring [, offset]) -> integer or nil", span())
        self.assertEqual([a.omittable for a in entry.args], [False, True])

    def test_index_forms(self):
        entry = self.parser.parse_line("array[index] -> object or nil", span())
        self.assertEqual((entry.method, entry.form), ("[]", INDEX))
        entry = self.parser.parse_line("array[start, length] = object -> object", span())
        self.assertEqual((entry.method, entry.form), ("[]=", INDEX_ASSIGN))
        self.assertEqual([a.name for a in entry.args], ["start", "length", "object"])

    def test_operator_forms(self):
        entry = self.parser.parse_line("int + other -> numeric", span())
        self.assertEqual((entry.method, entry.form), ("+", OPERATOR))
        entry = self.parser.parse_line("-int -> integer", span())
        self.assertEqual((entry.method, entry.form), ("-@", UNARY))

    def test_namespaced_receiver(self):
        entry = self.parser.parse_line("Process::Status.wait(pid) -> status", span())
        self.assertEqual(entry.receiver, "Process::Status")


class TestParseLineErrors(unittest.TestCase):
    """Lines that do not follow the grammar."""

    def setUp(self):
        self.parser = CallSeqParser()

    def test_missing_arrow(self):
        with self.assertRaises(CallSeqSyntaxError) as raised:
            self.parser.parse_line("array.count integer", span())
        self.assertNotIsInstance(raised.exception, BlockPlaceholderError)
        self.assertIn("->", raised.exception.reason)

    def test_missing_return_type(self):
        with self.assertRaises(CallSeqSyntaxError):
            self.parser.parse_line("array.count ->", span())

    def test_unbalanced_parentheses(self):
        with self.assertRaises(CallSeqSyntaxError):
            self.parser.parse_line("array.count(obj -> integer", span())

    def test_empty_argument(self):
        with self.assertRaises(CallSeqSyntaxError):
            self.parser.parse_line("array.insert(index, , obj) -> self", span())

    def test_error_keeps_span(self):
        where = span(line=7, column=5, offset=120)
        with self.assertRaises(CallSeqSyntaxError) as raised:
            self.parser.parse_line("not a call seq", where)
        self.assertEqual(raised.exception.span, where)


@pytest.mark.parametrize("line", [
    "array.each {|element| block } -> self",
    "array.each {|element| code } -> self",
    "array.each {|element| } -> self",
    "array.each {|element| do_something } -> self",
])
def test_block_placeholder_errors(parser, line):
    with pytest.raises(BlockPlaceholderError) as raised:
        parser.parse_line(line, span())
    assert raised.value.rule_id == 'BlockPlaceholderError'


@pytest.mark.parametrize("line", [
    "array.count -> integer",
    "obj.respond_to?(symbol, include_all=false) -> true or false",
    "array.each {|element| ... } -> self",
    "hash.each_pair {|key, value| ... } -> self",
    "loop { ... } -> object",
    "str.split(pattern = nil, limit = 0) -> array",
    "str.split(sep = $;, limit = 0) -> array",
    "str.center(width, pad_string = ' ') -> new_string",
    "str.index(substring [, offset]) -> integer or nil",
    "File.open(path, mode: 'r') -> file",
    "obj.public_send(name, *args, **opts, &block) -> object",
    "array[index] -> object or nil",
    "array[start, length] = object -> object",
    "int + other -> numeric",
    "-int -> integer",
    "Array.new(size = 0, default = nil) -> new_array",
    "hash.first -> [key, value] or nil",
    "puts(*objects) -> nil",
])
def test_render_then_parse_is_stable(parser, line):
    entry = parser.parse_line(line, span())
    rendered = entry.render()
    again = parser.parse_line(rendered, span())
    assert again == entry
    assert again.render() == rendered


class TestParseBlock(unittest.TestCase):
    """Whole call-seq paragraphs."""

    def setUp(self):
        self.parser = CallSeqParser()

    def test_count_forms_are_not_redundant(self):
        result = self.parser.parse_text(
            "array.count -> integer\n"
            "array.count(obj) -> integer\n"
            "array.count {|element| ... } -> integer"
        )
        self.assertEqual(len(result.entries), 3)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.redundancies, [])
        self.assertIsNone(result.receiver_naming)

    def test_entries_differing_by_trailing_argument_are_merged(self):
        result = self.parser.parse_text(
            "obj.respond_to?(symbol) -> true or false\n"
            "obj.respond_to?(symbol, include_all) -> true or false"
        )
        self.assertEqual(len(result.redundancies), 1)
        self.assertEqual(result.redundancies[0].recommendation.render(),
                         "obj.respond_to?(symbol, include_all=false) -> true or false")

    def test_merged_default_comes_from_prose(self):
        result = self.parser.parse_text(
            "str.split(pattern) -> array\nstr.split(pattern, limit) -> array",
            prose="Divides the string. When given, +limit+ defaults to +0+.",
        )
        self.assertEqual(result.redundancies[0].recommendation.render(),
                         "str.split(pattern, limit=0) -> array")

    def test_merged_default_is_nil_for_other_names(self):
        result = self.parser.parse_text("str.split(pattern) -> array\nstr.split(pattern, limit) -> array")
        self.assertEqual(result.redundancies[0].recommendation.render(),
                         "str.split(pattern, limit=nil) -> array")

    def test_prose_describing_the_argument_keeps_entries_apart(self):
        result = self.parser.parse_text(
            "hash.dig(key) -> object\nhash.dig(key, *identifiers) -> object",
        )
        self.assertEqual(result.redundancies, [])
        result = self.parser.parse_text(
            "str.ljust(width) -> new_string\nstr.ljust(width, pad) -> new_string",
            prose="With +pad+ given, pads with that string instead of spaces.",
        )
        self.assertEqual(result.redundancies, [])

    def test_different_returns_are_not_redundant(self):
        result = self.parser.parse_text("array.first(n) -> new_array\narray.first(n, m) -> object")
        self.assertEqual(result.redundancies, [])

    def test_receiver_naming_reported_once(self):
        result = self.parser.parse_text(
            "array.push(*objects) -> array\n"
            "array.append(*objects) -> array"
        )
        issue = result.receiver_naming
        self.assertIsNotNone(issue)
        self.assertEqual(issue.spelling, "array")
        self.assertEqual(issue.count, 2)
        self.assertEqual(issue.entry.method, "push")

    def test_receiver_keyword_is_a_naming_issue(self):
        result = self.parser.parse_text("array.clear -> receiver")
        self.assertEqual(result.receiver_naming.spelling, "receiver")

    def test_receiverless_entries_use_implicit_receiver(self):
        text = "push(*objects) -> array\nappend(*objects) -> array"
        self.assertIsNone(self.parser.parse_text(text).receiver_naming)
        issue = self.parser.parse_text(text, implicit_receiver="array").receiver_naming
        self.assertEqual((issue.spelling, issue.count), ("array", 2))

    def test_explicit_receiver_wins_over_implicit(self):
        result = self.parser.parse_text("ary.push(*objects) -> array", implicit_receiver="array")
        self.assertIsNone(result.receiver_naming)

    def test_self_is_correct(self):
        result = self.parser.parse_text("array.push(*objects) -> self")
        self.assertIsNone(result.receiver_naming)

    def test_bad_line_does_not_stop_parsing(self):
        result = self.parser.parse_text(
            "array.count -> integer\n"
            "array.count(obj) integer\n"
            "array.count {|element| block } -> integer"
        )
        self.assertEqual(len(result.entries), 1)
        self.assertEqual([e.rule_id for e in result.errors], ['CallSeqSyntaxError', 'BlockPlaceholderError'])
        self.assertEqual([e.span.line for e in result.errors], [2, 3])
        self.assertFalse(result.success)

    def test_parse_segment_skips_directive(self):
        segment = Segment(
            lines=("call-seq: array.size -> integer", "  array.length -> integer"),
            line_spans=(span(line=3, column=4, offset=40), span(line=4, column=4, offset=75)),
        )
        result = self.parser.parse(segment)
        self.assertEqual([e.method for e in result.entries], ["size", "length"])
        self.assertEqual(result.entries[0].span.column, 4 + len("call-seq: "))
        self.assertEqual(result.entries[1].span.column, 6)
