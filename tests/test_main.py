"""
Tests for the command-line report.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from main import main


class TestMain:

    def test_report(self, data_dir, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['main.py', data_dir])
        assert main() == 0
        out = capsys.readouterr().out
        assert 'Scoring scheme: position' in out
        assert 'Group A' in out
        assert 'No finalized matches yet.' in out
        assert 'R32-M1: T1 2-1 Cameroon' in out
        assert '1. Alice' in out
        assert 'Dave' not in out

    def test_scheme_override(self, data_dir, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['main.py', data_dir, '--scheme', 'exact_qualified'])
        assert main() == 0
        out = capsys.readouterr().out
        assert 'Scoring scheme: exact_qualified' in out
        assert 'groups 22' in out

    def test_missing_directory(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['main.py', str(tmp_path / 'nope')])
        assert main() == 1
        assert 'Data directory not found' in capsys.readouterr().err

    def test_no_groups(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['main.py', str(tmp_path)])
        assert main() == 1
        assert 'No groups loaded' in capsys.readouterr().out
