"""
Tests for comment extraction from C extension sources.
"""

import pytest

from structural_parsing.types import EntityKind


ARRAY_SOURCE = '''
    #include "ruby/ruby.h"

    /*
     *  call-seq:
     *    array.count -> integer
     *    array.count(obj) -> integer
     *
     *  Returns a count of specified elements.
     *
     *  Example:
     *
     *    [0, 1, 2].count # => 3
     */
    static VALUE
    rb_ary_count(int argc, VALUE *argv, VALUE ary)
    {
        return INT2FIX(0);
    }

    /*
     *  Returns the number of elements.
     */
    static VALUE
    rb_ary_length(VALUE ary)
    {
        return LONG2NUM(RARRAY_LEN(ary));
    }

    /*
     *  An ordered, integer-indexed collection of objects.
     */
    void
    Init_Array(void)
    {
        rb_cArray = rb_define_class("Array", rb_cObject);
        rb_define_method(rb_cArray, "count", rb_ary_count, -1);
        rb_define_method(rb_cArray, "length", rb_ary_length, 0);
        rb_define_method(rb_cArray, "size", rb_ary_length, 0);
        rb_define_singleton_method(rb_cArray, "try_convert", rb_ary_s_try_convert, 1);
        rb_define_alias(rb_cArray, "append", "push");
    }
'''


def by_name(pairs):
    return {entity.qualified_name: block for entity, block in pairs}


class TestRegistrations:

    def test_entities_from_registrations(self, extract):
        names = [entity.qualified_name for entity, _ in extract(ARRAY_SOURCE, 'c')]
        assert sorted(names) == sorted([
            'Array', 'Array#count', 'Array#length', 'Array#size',
            'Array.try_convert', 'Array#append',
        ])

    def test_method_takes_comment_above_its_function(self, extract):
        blocks = by_name(extract(ARRAY_SOURCE, 'c'))
        count = blocks['Array#count']
        assert [segment.lines[0] for segment in count.segments] == [
            'call-seq:', 'Returns a count of specified elements.', 'Example:', '  [0, 1, 2].count # => 3',
        ]
        assert count.segments[3].verbatim
        assert not count.segments[0].verbatim

    def test_second_registration_of_a_function_is_an_alias(self, extract):
        blocks = by_name(extract(ARRAY_SOURCE, 'c'))
        assert not blocks['Array#length'].is_empty
        assert blocks['Array#size'].is_empty
        assert blocks['Array#append'].is_empty

    def test_class_takes_comment_above_definition_function(self, extract):
        blocks = by_name(extract(ARRAY_SOURCE, 'c'))
        # The comment above Init_Array belongs to the C function, not the class call inside it.
        assert blocks['Array'].is_empty

    def test_singleton_registration(self, extract):
        entities = {entity.qualified_name: entity for entity, _ in extract(ARRAY_SOURCE, 'c')}
        assert entities['Array.try_convert'].singleton
        assert entities['Array#count'].kind is EntityKind.METHOD
        assert entities['Array'].kind is EntityKind.CLASS

    def test_spans_point_into_the_source(self, extract):
        blocks = by_name(extract(ARRAY_SOURCE, 'c'))
        synopsis = blocks['Array#count'].segments[1]
        assert synopsis.span.line == 8
        assert synopsis.span.column == 5

    def test_extraction_is_restartable(self, extract):
        assert extract(ARRAY_SOURCE, 'c') == extract(ARRAY_SOURCE, 'c')


class TestDirectives:

    def test_document_class_directive(self, extract):
        source = '''
            /*
             * Document-class: Comparable::Helper
             *
             * Mixin helpers.
             */

            void
            Init_compar(void)
            {
            }
        '''
        pairs = extract(source, 'c')
        blocks = by_name(pairs)
        assert 'Comparable::Helper' in blocks
        helper = blocks['Comparable::Helper']
        assert [segment.text for segment in helper.segments] == ['Mixin helpers.']

    def test_document_method_directive(self, extract):
        source = '''
            /*
             * Document-method: Integer#even?
             *
             * Returns true if int is an even number.
             */

            void
            Init_Numeric(void)
            {
                rb_cInteger = rb_define_class("Integer", rb_cNumeric);
                rb_define_method(rb_cInteger, "even?", int_even_p, 0);
            }
        '''
        blocks = by_name(extract(source, 'c'))
        assert blocks['Integer#even?'].segments[0].text == 'Returns true if int is an even number.'
        assert blocks['Integer'].is_empty


class TestFallbackAndMalformed:

    def test_functions_without_registrations(self, extract):
        source = '''
            /*
             * Returns the size.
             */
            static VALUE
            my_size(VALUE self)
            {
                return Qnil;
            }

            static void
            helper(void)
            {
            }
        '''
        pairs = extract(source, 'c')
        assert [entity.name for entity, _ in pairs] == ['my_size', 'helper']
        assert pairs[0][1].segments[0].text == 'Returns the size.'
        assert pairs[1][1].is_empty

    def test_unterminated_comment_is_malformed(self, extract):
        source = '''
            /*
             *  call-seq:
             *    array.count -> integer
             *
             *  Returns a count.

            static VALUE
            rb_ary_count(VALUE ary)
            {
                return Qnil;
            }

            void
            Init_Array(void)
            {
                rb_define_method(rb_cArray, "count", rb_ary_count, 0);
            }
        '''
        pairs = extract(source, 'c')
        malformed = [(entity, block) for entity, block in pairs if block.malformed]
        assert len(malformed) == 1
        entity, block = malformed[0]
        assert entity.qualified_name == 'Array#count'
        assert block.segments == ()
        assert (block.span.line, block.span.column) == (1, 1)

    def test_nested_opener_resumes_scanning(self, extract):
        source = '''
            /* never closed
            /*
             * Returns the size.
             */
            static VALUE
            my_size(VALUE self)
            {
                return Qnil;
            }
        '''
        pairs = extract(source, 'c')
        malformed = [block for _, block in pairs if block.malformed]
        assert len(malformed) == 1
        blocks = by_name(pairs)
        assert blocks[''].malformed
        assert blocks['my_size'].segments[0].text == 'Returns the size.'


def test_unknown_language_is_rejected(source_unit):
    from structural_parsing.extractors import CommentExtractor

    with pytest.raises(ValueError):
        list(CommentExtractor().extract(source_unit("x = 1", language='python')))
