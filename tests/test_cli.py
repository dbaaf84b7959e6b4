"""Integration tests for CLI commands (using grouped command hierarchy)."""

import json
from pathlib import Path

from typer.testing import CliRunner

from docgraph_cli import __version__
from docgraph_cli.cli import app


runner = CliRunner()


def _index(sample_repo_path: Path, name: str = "Sample"):
    return runner.invoke(app, ["project", "index", str(sample_repo_path), "--name", name])


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class TestProjectCommands:
    """Tests for 'dg project ...' commands."""

    def test_index_project(self, sample_repo_path: Path, temp_project_manager):
        result = _index(sample_repo_path)

        assert result.exit_code == 0
        assert "Indexed" in result.stdout
        assert "Sample" in result.stdout
        assert "Nodes: 7 | Edges: 8" in result.stdout
        assert temp_project_manager.get_current_project() == "Sample"

    def test_index_nonexistent_path(self, temp_project_manager):
        result = runner.invoke(app, ["project", "index", "/nonexistent/path"])

        assert result.exit_code != 0

    def test_list_empty(self, temp_project_manager):
        result = runner.invoke(app, ["project", "list"])

        assert result.exit_code == 0
        assert "No projects" in result.stdout

    def test_list_marks_current(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path, "Proj1")
        result = runner.invoke(app, ["project", "list"])

        assert result.exit_code == 0
        assert "* Proj1" in result.stdout

    def test_load_and_current(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path, "MyProj")
        runner.invoke(app, ["project", "unload"])

        result = runner.invoke(app, ["project", "load", "MyProj"])
        assert result.exit_code == 0
        assert "Loaded project 'MyProj'" in result.stdout

        result = runner.invoke(app, ["project", "current"])
        assert result.stdout.strip() == "MyProj"

    def test_load_nonexistent_project(self, temp_project_manager):
        result = runner.invoke(app, ["project", "load", "DoesNotExist"])

        assert result.exit_code != 0

    def test_delete_project(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path, "Gone")
        result = runner.invoke(app, ["project", "delete", "Gone"])

        assert result.exit_code == 0
        assert "Gone" not in temp_project_manager.list_projects()
        assert temp_project_manager.get_current_project() is None


class TestAnalyzeCommands:
    """Tests for 'dg analyze ...' commands."""

    def test_requires_loaded_project(self, temp_project_manager):
        result = runner.invoke(app, ["analyze", "build"])

        assert result.exit_code != 0
        assert "No project loaded" in result.output

    def test_build(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "build"])

        assert result.exit_code == 0
        assert "Nodes: 7 | Edges: 8" in result.stdout

    def test_impact_json(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "impact", "src/server.ts", "--pr", "12", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["prNumber"] == 12
        assert payload["changedFiles"] == ["src/server.ts"]
        assert [d["path"] for d in payload["affectedDocs"]] == ["docs/guide.md", "README.md", "docs/api.md"]
        assert payload["totalImpact"] == 2.0

    def test_impact_table(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "impact", "src/server.ts"])

        assert result.exit_code == 0
        assert "Blast radius" in result.stdout
        assert "Total impact: 2.00" in result.stdout

    def test_impact_none(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "impact", "src/handler.ts"])

        assert result.exit_code == 0
        assert "Affected docs: none found" in result.stdout
        assert "Total impact: 0.00" in result.stdout

    def test_broken_refs_exit_code(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "broken-refs", "--json"])

        assert result.exit_code == 1
        findings = json.loads(result.stdout)
        assert {"source": "src/handler.ts", "target": "src/gone", "type": "import"} in findings
        assert len(findings) == 2

    def test_broken_refs_clean_repo(self, temp_dir: Path, temp_project_manager):
        repo = temp_dir / "clean"
        (repo / "docs").mkdir(parents=True)
        (repo / "docs" / "a.md").write_text("[b](./b.md)", encoding="utf-8")
        (repo / "docs" / "b.md").write_text("# B", encoding="utf-8")
        runner.invoke(app, ["project", "index", str(repo), "--name", "Clean"])

        result = runner.invoke(app, ["analyze", "broken-refs"])

        assert result.exit_code == 0
        assert "No broken references found." in result.stdout

    def test_deps(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "deps", "src/server.ts"])

        assert result.exit_code == 0
        assert "- src/handler.ts (code)" in result.stdout
        assert "- docs/guide.md (doc)" in result.stdout

    def test_deps_unknown(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "deps", "nope.ts"])

        assert result.exit_code == 0
        assert "No dependencies recorded" in result.stdout

    def test_export_to_file(self, sample_repo_path: Path, temp_project_manager, temp_dir: Path):
        _index(sample_repo_path)
        output = temp_dir / "graph.dot"
        result = runner.invoke(app, ["analyze", "export", "--format", "dot", "--output", str(output)])

        assert result.exit_code == 0
        assert "Exported graph" in result.stdout
        assert output.read_text(encoding="utf-8").startswith("digraph DocDeps {")

    def test_export_to_stdout(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "export", "-f", "cytoscape"])

        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["nodes"]) == 7

    def test_export_bad_format(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "export", "--format", "svg"])

        assert result.exit_code != 0

    def test_snapshot(self, sample_repo_path: Path, temp_project_manager):
        _index(sample_repo_path)
        result = runner.invoke(app, ["analyze", "snapshot"])

        assert result.exit_code == 0
        assert "Nodes: 7 | Edges: 8" in result.stdout
        assert "Built at:" in result.stdout


class TestConfigCommands:
    """Tests for 'dg config ...' commands."""

    def test_set_and_show(self, temp_project_manager, temp_dir: Path):
        result = runner.invoke(app, ["config", "set", "--max-file-bytes", "4096", "--skip-dir", "vendor"])

        assert result.exit_code == 0
        assert "Configuration saved" in result.stdout
        assert (temp_dir / "config.toml").exists()

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "4096" in result.stdout
        assert "vendor" in result.stdout

    def test_set_requires_an_option(self, temp_project_manager):
        result = runner.invoke(app, ["config", "set"])

        assert result.exit_code != 0

    def test_set_rejects_bad_format(self, temp_project_manager):
        result = runner.invoke(app, ["config", "set", "--export-format", "svg"])

        assert result.exit_code != 0
