"""
Tests for collecting and checking source files on disk.
"""

import pytest

from doc_analyzer import DocChecker
from rules.types import Severity
from structural_parsing.source_classifier import SourceClassifier
from structural_parsing.types import SourceUnit

CLEAN_RUBY = """\
class Widget
  # Returns the widget's name.
  def name
  end
end
"""

UNDOCUMENTED_C = """\
/*
 *  Returns the number of elements.
 */
static VALUE
rb_ary_length(VALUE ary)
{
}

void
Init_Array(void)
{
    rb_cArray = rb_define_class("Array", rb_cObject);
    rb_define_method(rb_cArray, "length", rb_ary_length, 0);
}
"""


@pytest.fixture
def tree(tmp_path):
    (tmp_path / 'lib').mkdir()
    (tmp_path / 'lib' / 'widget.rb').write_text(CLEAN_RUBY, encoding='utf-8')
    (tmp_path / 'ext').mkdir()
    (tmp_path / 'ext' / 'array.c').write_text(UNDOCUMENTED_C, encoding='utf-8')
    (tmp_path / 'README.md').write_text('# Widgets\n', encoding='utf-8')
    return tmp_path


class TestCollect:

    def test_directories_are_walked_in_order(self, tree):
        sources, skipped = DocChecker(max_workers=1).collect([str(tree)])
        assert [(path.replace(str(tree), ''), language) for path, language in sources] == [
            ('/ext/array.c', 'c'),
            ('/lib/widget.rb', 'ruby'),
        ]
        assert skipped == []

    def test_named_unsupported_file_is_skipped(self, tree):
        readme = str(tree / 'README.md')
        sources, skipped = DocChecker(max_workers=1).collect([readme])
        assert sources == []
        assert skipped == [readme]


class TestCheckPaths:

    def test_report_covers_every_file(self, tree):
        report = DocChecker(max_workers=2).check_paths([str(tree)])
        assert report.files_checked == 2
        assert [v.rule_id for v in report] == ['MissingCallSeq']
        assert report.violations[0].span.path.endswith('array.c')
        assert report.exit_code() == 1

    def test_missing_file_is_a_violation(self, tmp_path):
        missing = str(tmp_path / 'gone.rb')
        report = DocChecker(max_workers=1).check_paths([missing])
        assert [v.rule_id for v in report] == ['SourceReadError']
        assert report.violations[0].severity is Severity.ERROR
        assert (report.violations[0].span.line, report.violations[0].span.column) == (1, 1)

    def test_undecodable_file_is_a_violation(self, tmp_path):
        broken = tmp_path / 'broken.c'
        broken.write_bytes(b'/* \xff\xfe */\n')
        report = DocChecker(max_workers=1).check_paths([str(broken)])
        assert [v.rule_id for v in report] == ['SourceReadError']

    def test_results_do_not_depend_on_worker_count(self, tree):
        serial = DocChecker(max_workers=1).check_paths([str(tree)])
        parallel = DocChecker(max_workers=4).check_paths([str(tree)])
        assert serial.records() == parallel.records()


def test_check_units_in_memory():
    units = [
        SourceUnit(path='a.rb', text=CLEAN_RUBY, language='ruby'),
        SourceUnit(path='b.c', text=UNDOCUMENTED_C, language='c'),
    ]
    report = DocChecker(max_workers=2).check_units(units)
    assert report.files_checked == 2
    assert [(v.span.path, v.rule_id) for v in report] == [('b.c', 'MissingCallSeq')]


@pytest.mark.parametrize("path,language", [
    ('array.c', 'c'),
    ('ruby.h', 'c'),
    ('lib/set.rb', 'ruby'),
    ('Rakefile.rake', 'ruby'),
    ('ARRAY.C', 'c'),
    ('notes.txt', None),
    ('Makefile', None),
])
def test_source_classifier(path, language):
    classifier = SourceClassifier()
    assert classifier.classify(path) == language
    assert classifier.is_supported(path) is (language is not None)
