"""Tests for the ``run.py`` command line entry point."""

from __future__ import annotations

import json
import zipfile

import run


def test_generate_writes_archive(tmp_path) -> None:
    spec_path = tmp_path / "echo.yaml"
    spec_path.write_text(
        "agent_name: Echo\npackage_identifier: com.example.echo\nprovider_credential: key\n",
        encoding="utf-8",
    )
    output = tmp_path / "echo.zip"

    assert run.main(["generate", str(spec_path), "-o", str(output)]) == 0

    with zipfile.ZipFile(output) as archive:
        assert "pom.xml" in archive.namelist()


def test_generate_reports_domain_errors_as_json(tmp_path, capsys) -> None:
    spec_path = tmp_path / "echo.yaml"
    spec_path.write_text(
        "agent_name: Echo\npackage_identifier: com.example.echo\nprovider_credential: key\ntool_ids: [missing]\n",
        encoding="utf-8",
    )

    assert run.main(["generate", str(spec_path)]) == 1

    detail = json.loads(capsys.readouterr().err)
    assert detail["type"] == "UnresolvedReferenceError"
    assert detail["references"] == [{"kind": "tool", "id": "missing"}]


def test_refresh_prints_summary_of_empty_registries(capsys) -> None:
    assert run.main(["refresh", "all"]) == 0

    assert json.loads(capsys.readouterr().out) == {"agents": {}, "tools": {}}
