"""Tests for discovery, configuration, reporting and the command line."""

import json
from pathlib import Path

import pytest

from riskreg_cli.__main__ import main
from riskreg_cli.config import DEFAULT_CONFIG, load_config
from riskreg_cli.errors import WorkspaceError
from riskreg_cli.renderer import markdown_report, render_text
from riskreg_cli.scanner import scan_files
from riskreg_cli.utils import discover_files, iter_lines, language_for


class TestDiscovery:
    def test_filters_and_orders(self, tmp_path, make_file):
        make_file("sub/b.go", "package b\n")
        make_file("a.py", "x = 1\n")
        make_file("node_modules/pkg/index.js", "x\n")
        make_file("build/out.js", "x\n")
        make_file("README.md", "# hi\n")
        make_file("ignored.py", "x\n")
        make_file(".gitignore", "ignored.py\n")

        found = discover_files(str(tmp_path))
        rel = [(Path(p).relative_to(tmp_path).as_posix(), lang) for p, lang in found]
        assert rel == [("a.py", ".py"), ("sub/b.go", ".go")]

    def test_config_exclude(self, tmp_path, make_file):
        make_file("testdata/fixture.go", "package t\n")
        make_file("main.go", "package main\n")
        cfg = load_config(str(tmp_path))
        cfg.data["exclude"] = ["testdata/**"]
        found = discover_files(str(tmp_path), cfg)
        assert [Path(p).name for p, _ in found] == ["main.go"]

    def test_missing_root(self, tmp_path):
        with pytest.raises(WorkspaceError):
            discover_files(str(tmp_path / "nope"))

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("a.go", ".go"), ("x/y.tsx", ".tsx"), ("Main.java", ".java"), ("a.md", None), ("Makefile", None)],
    )
    def test_language_for(self, name, expected):
        assert language_for(name) == expected

    def test_iter_lines(self, make_file):
        path = make_file("f.py", b"one\r\ntwo\n\xffbad\nlast")
        assert list(iter_lines(path)) == [(1, "one"), (2, "two"), (3, None), (4, "last")]


class TestConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(str(tmp_path))
        assert cfg.workers == 1
        assert ".cs" in cfg.data["extensions"]

    def test_user_values(self, tmp_path, make_file):
        make_file(".riskreg.yml", "workers: 3\nexclude:\n  - testdata/**\n")
        cfg = load_config(str(tmp_path))
        assert cfg.workers == 3
        assert cfg.data["exclude"] == ["testdata/**"]

    def test_malformed_yaml_uses_defaults(self, tmp_path, make_file):
        make_file(".riskreg.yml", "workers: [1\n")
        cfg = load_config(str(tmp_path))
        assert cfg.workers == 1

    def test_non_utf8_config_uses_defaults(self, tmp_path, make_file):
        make_file(".riskreg.yml", b"workers: 2\n# \xff\xfe\n")
        cfg = load_config(str(tmp_path))
        assert cfg.workers == 1
        assert cfg.data["exclude"] == []

    @pytest.mark.parametrize(
        ("body", "key", "expected"),
        [
            ('exclude: "testdata/**"\n', "exclude", []),
            ('extensions: ".go"\n', "extensions", DEFAULT_CONFIG["extensions"]),
            ("skip_dirs: [1, 2]\n", "skip_dirs", DEFAULT_CONFIG["skip_dirs"]),
            ("workers: many\n", "workers", 1),
            ("workers: true\n", "workers", 1),
        ],
    )
    def test_wrong_types_keep_defaults(self, tmp_path, make_file, body, key, expected):
        make_file(".riskreg.yml", body)
        make_file("testdata/t.go", "package t\n")
        cfg = load_config(str(tmp_path))
        assert cfg.data[key] == expected
        assert [Path(p).name for p, _ in discover_files(str(tmp_path), cfg)] == ["t.go"]

    def test_empty_skip_dirs_is_honored(self, tmp_path, make_file):
        make_file(".riskreg.yml", "skip_dirs: []\n")
        make_file("node_modules/pkg/index.js", "x\n")
        cfg = load_config(str(tmp_path))
        found = discover_files(str(tmp_path), cfg)
        assert [Path(p).relative_to(tmp_path).as_posix() for p, _ in found] == ["node_modules/pkg/index.js"]


class TestReports:
    def test_text_and_markdown(self, make_file):
        path = make_file("a.go", "// TODO: auth bypass\nresp, _ := http.Get(u)\n")
        result = scan_files([(path, ".go")], repo_root="ws")

        text = render_text(result)
        assert "[RISK-001] HIGH" in text
        assert f"{path}:1 (tech_debt) Security-related technical debt" in text
        assert f"{path}:2 (missing_recovery) External service calls" in text
        assert text.splitlines()[-1] == "2 findings in 1 files (0 skipped), scan complete"

        md = markdown_report(result)
        assert "## RISK-001: Security-related technical debt marker (1)" in md
        assert "## RISK-004" in md
        assert "## RISK-003" not in md

    def test_summary(self, make_file):
        path = make_file("a.go", "// TODO: auth bypass\n")
        s = scan_files([(path, ".go")]).summary()
        assert s["by_rule"] == {"RISK-001": 1}
        assert s["by_severity"] == {"High": 1, "Medium": 0, "Low": 0}


class TestMain:
    def test_rules(self, capsys):
        assert main(["rules"]) == 0
        out = capsys.readouterr().out
        assert "RISK-005" in out

    def test_scan_writes_reports(self, tmp_path, make_file, capsys):
        make_file("svc.py", "# HACK: disable csrf for now\n")
        assert main(["scan", str(tmp_path), "--json", "--markdown"]) == 0
        data = json.loads((tmp_path / "risk-register.json").read_text())
        assert data["summary"]["complete"] is True
        assert data["findings"][0]["rule_id"] == "RISK-001"
        assert data["findings"][0]["metadata"] == {"risk_type": "tech_debt"}
        assert (tmp_path / "RISK_REGISTER.md").exists()
        assert "[RISK-001]" in capsys.readouterr().out

    def test_fail_on(self, tmp_path, make_file):
        make_file("svc.py", "# HACK: disable csrf for now\n")
        assert main(["scan", str(tmp_path), "--fail-on", "high"]) == 1

    def test_fail_on_below_threshold(self, tmp_path, make_file):
        make_file("svc.py", "print 'hi'\n")
        assert main(["scan", str(tmp_path), "--fail-on", "high"]) == 0
        assert main(["scan", str(tmp_path), "--fail-on", "medium"]) == 1

    def test_missing_workspace(self, tmp_path):
        assert main(["scan", str(tmp_path / "missing")]) == 2
