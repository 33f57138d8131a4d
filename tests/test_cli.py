"""
Command line tests
==================

Usage:
    python -m pytest tests/test_cli.py -v
"""
from kscope.cli import build_argument_parser, main


def test_argument_defaults():
    args = build_argument_parser().parse_args([])
    assert args.file is None
    assert not args.evaluate
    assert not args.no_dump
    assert args.module_name == 'kscope'


def test_compiles_file(tmp_path, capsys):
    source = tmp_path / 'demo.ks'
    source.write_text('extern sin(x)\ndef f(a) sin(a) * 2\nf(1)\n', encoding='utf-8')
    assert main([str(source), '--module-name', 'demo']) == 0
    out = capsys.readouterr().out
    assert "; ModuleID = 'demo'" in out
    assert 'declare double @sin(double %x)' in out
    assert 'define double @f(double %a)' in out
    assert '__anon_expr' not in out


def test_no_dump(tmp_path, capsys):
    source = tmp_path / 'demo.ks'
    source.write_text('def f(a) a', encoding='utf-8')
    assert main([str(source), '--no-dump']) == 0
    assert capsys.readouterr().out == ''


def test_errors_set_exit_status(tmp_path, capsys):
    source = tmp_path / 'bad.ks'
    source.write_text('def f(a) b\ndef g(a) a', encoding='utf-8')
    assert main([str(source), '--eval']) == 1
    assert 'define double @g' in capsys.readouterr().out


def test_dropped_argument_sets_exit_status(tmp_path, capsys):
    source = tmp_path / 'args.ks'
    source.write_text('extern f(a)\nf(1,)\n', encoding='utf-8')
    assert main([str(source)]) == 1
