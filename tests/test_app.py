"""
Tests for the command-line interface.
"""

import json
import sys

import pytest
from smartform import __version__
from smartform.app import main


@pytest.fixture
def run_cli(monkeypatch, tmp_path):
    """Run ``smartform <args>`` in an empty working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SMARTFORM_DB", raising=False)
    monkeypatch.delenv("SMARTFORM_STORE", raising=False)

    def run(*args):
        monkeypatch.setattr(sys, "argv", ["smartform", *[str(a) for a in args]])
        main()

    return run


class TestProfileCommands:
    """Test profile management commands."""

    def test_set_show_and_list(self, run_cli, temp_store_file, capsys):
        run_cli("profile-set", "--name", "home", "--key", "email", "--value", "me@home.org", "--store", temp_store_file)
        run_cli("profile-show", "--name", "home", "--store", temp_store_file)
        run_cli("profiles", "--store", temp_store_file)

        out = capsys.readouterr().out
        assert "email: me@home.org" in out
        assert "home (1 fields)" in out

    def test_set_blank_value_rejected(self, run_cli, temp_store_file):
        with pytest.raises(SystemExit):
            run_cli("profile-set", "--name", "home", "--key", "email", "--value", "  ", "--store", temp_store_file)

    def test_unset_and_delete(self, run_cli, populated_store, capsys):
        run_cli("profile-unset", "--name", "work", "--key", "phone", "--store", populated_store)
        data = json.loads(populated_store.read_text())
        assert "phone" not in data["profiles"]["work"]

        run_cli("profile-delete", "--name", "work", "--store", populated_store)
        assert json.loads(populated_store.read_text())["profiles"] == {}

        with pytest.raises(SystemExit):
            run_cli("profile-delete", "--name", "work", "--store", populated_store)


class TestMatchCommand:
    """Test single-question matching."""

    def test_profile_match(self, run_cli, populated_store, capsys):
        run_cli("match", "--question", "Your email", "--profile", "work", "--store", populated_store)
        out = capsys.readouterr().out
        assert "Answer: jane@example.com" in out
        assert "Source: profile" in out

    def test_learned_match(self, run_cli, populated_store, capsys):
        run_cli("match", "--question", "Current employer", "--profile", "work", "--store", populated_store)
        out = capsys.readouterr().out
        assert "Answer: Acme Corp" in out
        assert "Source: learned" in out
        assert "Score: 1.000" in out

    def test_explain_lists_every_key(self, run_cli, populated_store, capsys):
        run_cli("match", "--question", "Favorite color", "--profile", "work", "--explain", "--store", populated_store)
        out = capsys.readouterr().out
        assert "No match" in out
        for key in ("name", "email", "phone", "gender"):
            assert f"  {key}: {{" in out

    def test_unknown_profile(self, run_cli, populated_store):
        with pytest.raises(SystemExit):
            run_cli("match", "--question", "Email", "--profile", "nobody", "--store", populated_store)


class TestFillCommand:
    """Test filling saved form documents."""

    def test_fill_writes_output_and_learns(self, run_cli, populated_store, sample_form_html, tmp_path, capsys):
        form = tmp_path / "form.html"
        form.write_text(sample_form_html)
        output = tmp_path / "out" / "filled.html"

        run_cli("fill", "--html", form, "--profile", "work", "--output", output, "--store", populated_store)

        filled = output.read_text()
        assert 'value="Jane Doe"' in filled
        assert 'value="jane@example.com"' in filled
        out = capsys.readouterr().out
        assert "Done (fill)." in out
        assert "applied=4" in out

        learned = json.loads(populated_store.read_text())["learned"]
        assert len(learned) == 6
        assert {"question": "Full Name*", "answer": "Jane Doe"}.items() <= learned[2].items()

    def test_review_does_not_fill_or_learn(self, run_cli, populated_store, sample_form_html, tmp_path, capsys):
        form = tmp_path / "form.html"
        form.write_text(sample_form_html)
        output = tmp_path / "reviewed.html"

        run_cli("fill", "--html", form, "--profile", "work", "--review", "--output", output, "--store", populated_store)

        reviewed = output.read_text()
        assert "Suggested: Jane Doe" in reviewed
        assert 'value="Jane Doe"' not in reviewed
        assert "Done (review)." in capsys.readouterr().out
        assert len(json.loads(populated_store.read_text())["learned"]) == 2

    def test_page_without_questions(self, run_cli, populated_store, tmp_path):
        form = tmp_path / "closed.html"
        form.write_text("<html><body><p>This form is no longer accepting responses</p></body></html>")
        with pytest.raises(SystemExit, match="No question elements found"):
            run_cli("fill", "--html", form, "--profile", "work", "--store", populated_store)

    def test_missing_input(self, run_cli, populated_store, tmp_path):
        with pytest.raises(SystemExit):
            run_cli("fill", "--html", tmp_path / "missing.html", "--profile", "work", "--store", populated_store)


class TestLearnedCommands:
    """Test learned-pair management commands."""

    def test_list_and_search(self, run_cli, populated_store, capsys):
        run_cli("learned", "--search", "acme", "--store", populated_store)
        out = capsys.readouterr().out
        assert "[0]" in out
        assert "A: Acme Corp" in out
        assert "LinkedIn" not in out

    def test_add_delete_clear(self, run_cli, populated_store, capsys):
        run_cli("learned-add", "--question", "Favorite color", "--answer", "Blue", "--store", populated_store)
        assert len(json.loads(populated_store.read_text())["learned"]) == 3

        run_cli("learned-delete", "--index", "0", "--store", populated_store)
        assert "Deleted: Current employer -> Acme Corp" in capsys.readouterr().out

        with pytest.raises(SystemExit):
            run_cli("learned-clear", "--store", populated_store)
        run_cli("learned-clear", "--yes", "--store", populated_store)
        assert json.loads(populated_store.read_text())["learned"] == []

    def test_export_then_import_into_database(self, run_cli, populated_store, tmp_path, capsys):
        exported = tmp_path / "mappings.json"
        db = tmp_path / "learned.db"

        run_cli("learned-export", "--output", exported, "--store", populated_store)
        run_cli("learned-import", "--input", exported, "--db", db)
        run_cli("learned", "--db", db)

        out = capsys.readouterr().out
        assert "Exported 2 learned pairs" in out
        assert "Imported 2 learned pairs" in out
        assert "Q: LinkedIn profile URL" in out

    def test_import_rejects_non_list(self, run_cli, temp_store_file, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"question": "Email"}')
        with pytest.raises(SystemExit):
            run_cli("learned-import", "--input", bad, "--store", temp_store_file)


class TestSettingsCommand:
    """Test settings display and update."""

    def test_update_is_saved(self, run_cli, temp_store_file, capsys):
        run_cli("settings", "--review", "--threshold", "0.7", "--store", temp_store_file)

        settings = json.loads(temp_store_file.read_text())["settings"]
        assert settings == {"reviewMode": True, "learningEnabled": False, "threshold": 0.7}
        assert "Threshold: 0.70" in capsys.readouterr().out

    def test_out_of_range_threshold(self, run_cli, temp_store_file):
        with pytest.raises(SystemExit):
            run_cli("settings", "--threshold", "1.5", "--store", temp_store_file)


def test_version(run_cli, capsys):
    run_cli("--version")
    assert capsys.readouterr().out.strip() == __version__
