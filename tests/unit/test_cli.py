"""
Tests for the doccheck command line.
"""

import json

import pytest

from main import EXIT_OK, EXIT_USAGE, EXIT_VIOLATIONS, build_parser, main

REDUNDANT = """\
module Kernel
  # call-seq:
  #   obj.respond_to?(symbol) -> true or false
  #   obj.respond_to?(symbol, include_all) -> true or false
  #
  # Returns +true+ if +obj+ responds to the given method.
  def respond_to?(symbol, include_all = false)
  end
end
"""

MISSING_SYNOPSIS = """\
class Array
  # call-seq:
  #   array.take(n) -> new_array
  def take(n)
  end
end
"""


@pytest.fixture
def write(tmp_path):
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return str(path)
    return _write


def test_parser_defaults():
    args = build_parser().parse_args(['check', 'lib'])
    assert args.command == 'check'
    assert args.paths == ['lib']
    assert args.severity_threshold == 'error'
    assert args.output_format == 'text'
    assert args.classification is None
    assert args.workers is None


def test_advisories_pass_by_default(write, capsys):
    path = write('kernel.rb', REDUNDANT)
    assert main(['check', path]) == EXIT_OK
    out = capsys.readouterr().out
    assert 'RedundantEntry' in out
    assert 'suggestion: obj.respond_to?(symbol, include_all=false) -> true or false' in out


def test_advisory_threshold_fails(write):
    path = write('kernel.rb', REDUNDANT)
    assert main(['check', path, '--severity-threshold', 'advisory']) == EXIT_VIOLATIONS


def test_json_output(write, capsys):
    path = write('array.rb', MISSING_SYNOPSIS)
    assert main(['check', path, '--format', 'json', '--workers', '1']) == EXIT_VIOLATIONS
    data = json.loads(capsys.readouterr().out)
    assert data['summary']['errors'] == 1
    assert data['violations'][0]['rule_id'] == 'MissingSynopsis'
    assert data['violations'][0]['path'] == path
    assert data['violations'][0]['line'] == 2


def test_clean_run(write, capsys):
    path = write('widget.rb', "class Widget\n  # Returns the name.\n  def name\n  end\nend\n")
    assert main(['check', path]) == EXIT_OK
    assert 'No documentation violations found (1 files checked).' in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    [],
    ['check'],
    ['check', 'lib', '--format', 'xml'],
    ['check', 'lib', '--workers', '0'],
    ['lint', 'lib'],
])
def test_usage_errors(argv):
    assert main(argv) == EXIT_USAGE


def test_classification_file(write):
    path = write('array.rb', """\
class Array
  # call-seq:
  #   array.map! {|element| ... } -> new_array
  #
  # Calls the block with each element.
  def map!
  end
end
""")
    classification = write('classification.yaml', "Array#map!: false\n")
    assert main(['check', path]) == EXIT_OK
    assert main(['check', path, '--classification', classification]) == EXIT_VIOLATIONS


def test_invalid_classification_file(write):
    path = write('widget.rb', "class Widget\nend\n")
    classification = write('classification.yaml', "Widget#name: sometimes\n")
    assert main(['check', path, '--classification', classification]) == EXIT_USAGE


def test_checker_config_matches_doc_checker_arguments():
    from config import Config
    from doc_analyzer import DocChecker

    options = Config.get_checker_config()
    assert set(options) == {'max_workers', 'max_related', 'autolink_threshold'}
    assert DocChecker(**options).max_workers >= 1
