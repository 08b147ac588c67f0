"""
Tests for the command line entry point
"""

import json

import pytest

from simple_odata.config import reset_settings
from simple_odata.main import build_parser, main


@pytest.fixture
def dry_run_env(monkeypatch, tmp_path, sample_metadata):
    metadata_path = tmp_path / "metadata.xml"
    metadata_path.write_text(sample_metadata, encoding="utf-8")
    monkeypatch.setenv("ODATA_SERVICE_URL", "https://sales.example.com/odata")
    monkeypatch.setenv("METADATA_FILE", str(metadata_path))
    monkeypatch.setenv("AUTH_PROVIDER", "none")
    reset_settings()
    yield
    reset_settings()


@pytest.mark.unit
class TestCommandLine:
    def test_update_requires_key_or_where(self):
        """Test update requires key or where"""
        parser = build_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["update", "Orders", '{"Note": "x"}'])

    def test_invalid_json_argument(self):
        """Test an invalid JSON argument is rejected"""
        parser = build_parser()

        with pytest.raises(SystemExit):
            parser.parse_args(["insert", "Orders", "{not json"])

    def test_dry_run_insert(self, dry_run_env, capsys):
        """Test dry run insert"""
        exit_code = main([
            "--dry-run", "insert", "Orders",
            '{"OrderId": 5, "Total": 100, "Customer": {"CustomerId": 9}}',
        ])

        assert exit_code == 0
        commands = json.loads(capsys.readouterr().out)
        assert commands == [{
            "verb": "POST",
            "path": "Orders",
            "body": {"OrderId": 5, "Total": 100, "Customer@odata.bind": "Customers(9)"},
            "content_id": 0,
            "omit_from_result": False,
            "depends_on": [],
        }]

    def test_dry_run_update_with_unlink(self, dry_run_env, capsys):
        """Test dry run update with unlink"""
        exit_code = main([
            "--dry-run", "update", "Orders", "--key", '{"OrderId": 5}',
            '{"Note": "rush", "Lines": null}',
        ])

        assert exit_code == 0
        commands = json.loads(capsys.readouterr().out)
        assert [(c["verb"], c["path"]) for c in commands] == [
            ("PATCH", "Orders(5)"),
            ("DELETE", "Orders(5)/Lines/$ref"),
        ]

    def test_unknown_member_fails(self, dry_run_env, capsys):
        """Test unknown member fails"""
        exit_code = main(["--dry-run", "insert", "Orders", '{"Bogus": 1}'])

        assert exit_code == 1
        assert "Bogus" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        """Test no command prints help"""
        assert main([]) == 2
        assert "usage" in capsys.readouterr().out
