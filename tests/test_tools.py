"""Tests for MCP tool implementations."""

import pytest

from pipeoutline_mcp.tools.find_nodes import find_nodes
from pipeoutline_mcp.tools.get_outline import get_outline
from pipeoutline_mcp.tools.get_property_values import get_property_values
from pipeoutline_mcp.tools.get_remote_outline import get_remote_outline, parse_github_url
from pipeoutline_mcp.tools.list_pipeline_files import list_pipeline_files


class TestGetOutline:
    def test_basic(self, pipeline_file, cache):
        result = get_outline(str(pipeline_file), cache=cache)
        assert "error" not in result
        assert result["node_count"] == 6
        outline = result["outline"]
        assert outline["key"] == "root"
        assert [c["value"] for c in outline["children"]] == ["Build", "Deploy"]
        assert result["_meta"]["document_count"] == 1
        assert result["_meta"]["parse_errors"] == []

    def test_flat(self, pipeline_file, cache):
        result = get_outline(str(pipeline_file), flat=True, cache=cache)
        entries = result["outline"]
        assert [(e["key"], e["depth"]) for e in entries] == [
            ("stage", 0),
            ("job", 1),
            ("task", 2),
            ("script", 2),
            ("stage", 0),
            ("deployment", 1),
        ]
        assert all("children" not in e for e in entries)

    def test_workspace_relative_path(self, pipeline_file, cache):
        result = get_outline(pipeline_file.name, workspace=str(pipeline_file.parent), cache=cache)
        assert "error" not in result

    def test_file_not_found(self, tmp_path, cache):
        result = get_outline(str(tmp_path / "missing.yml"), cache=cache)
        assert "error" in result

    def test_workspace_escape(self, tmp_path, pipeline_file, cache):
        workspace = tmp_path / "inner"
        workspace.mkdir()
        result = get_outline(str(pipeline_file), workspace=str(workspace), cache=cache)
        assert "outside the workspace" in result["error"]

    def test_too_large(self, pipeline_file, cache, monkeypatch):
        monkeypatch.setenv("PIPEOUTLINE_MAX_FILE_SIZE", "16")
        result = get_outline(str(pipeline_file), cache=cache)
        assert "limit" in result["error"]

    def test_not_utf8(self, tmp_path, cache):
        path = tmp_path / "bad.yml"
        path.write_bytes(b"stage: \xff\xfe\n")
        result = get_outline(str(path), cache=cache)
        assert "UTF-8" in result["error"]

    def test_empty_file(self, tmp_path, cache):
        path = tmp_path / "empty.yml"
        path.write_text("")
        result = get_outline(str(path), cache=cache)
        assert result["outline"]["children"] == []
        assert result["node_count"] == 0
        assert result["_meta"]["document_count"] == 0

    def test_parse_error_reported(self, tmp_path, cache):
        path = tmp_path / "broken.yml"
        path.write_text("stage: A\n---\nstage: [B\n")
        result = get_outline(str(path), cache=cache)
        assert result["node_count"] == 1
        assert len(result["_meta"]["parse_errors"]) == 1


class TestFindNodes:
    def test_basic(self, pipeline_file, cache):
        result = find_nodes(str(pipeline_file), "job", cache=cache)
        assert result["count"] == 1
        assert result["nodes"][0]["value"] == "Compile"
        assert result["key"] == "job"

    def test_any_key(self, pipeline_file, cache):
        result = find_nodes(str(pipeline_file), "displayName", cache=cache)
        assert [n["value"] for n in result["nodes"]] == ["Finish"]

    def test_missing_file(self, tmp_path, cache):
        assert "error" in find_nodes(str(tmp_path / "nope.yml"), "job", cache=cache)


class TestGetPropertyValues:
    def test_inputs(self, inputs_file, cache):
        result = get_property_values(str(inputs_file), 1, 8, "inputs", cache=cache)
        assert result["values"] == {"command": "build", "verbose": "true", "retries": "3"}
        assert result["position"] == {"line": 1, "character": 8}

    def test_ambiguous_gives_null(self, inputs_file, cache):
        result = get_property_values(str(inputs_file), 6, 4, "inputs", cache=cache)
        assert "error" not in result
        assert result["values"] is None

    def test_invalid_position(self, inputs_file, cache):
        result = get_property_values(str(inputs_file), -1, 0, "inputs", cache=cache)
        assert "error" in result


class TestListPipelineFiles:
    def test_basic(self, sample_workspace, cache):
        result = list_pipeline_files(str(sample_workspace), cache=cache)
        assert result["success"] is True
        paths = [f["path"] for f in result["files"]]
        assert paths == ["azure-pipelines.yml", "ci/deploy.yaml"]
        counts = {f["path"]: f["node_count"] for f in result["files"]}
        assert counts == {"azure-pipelines.yml": 6, "ci/deploy.yaml": 2}

    def test_skips_secrets(self, sample_workspace, cache):
        result = list_pipeline_files(str(sample_workspace), cache=cache)
        assert result["skipped_secrets"] == ["ci/leaky.yml"]
        assert str((sample_workspace / "ci" / "leaky.yml").resolve()) not in cache

    def test_include_plain_yaml(self, sample_workspace, cache):
        result = list_pipeline_files(str(sample_workspace), pipelines_only=False, cache=cache)
        paths = [f["path"] for f in result["files"]]
        assert "ci/settings.yml" in paths

    def test_nonexistent_path(self, tmp_path, cache):
        result = list_pipeline_files(str(tmp_path / "nowhere"), cache=cache)
        assert result["success"] is False
        assert "error" in result

    def test_deeply_nested_file_does_not_abort_listing(self, tmp_path, cache):
        (tmp_path / "good.yml").write_text("steps:\n- script: echo ok\n")
        (tmp_path / "z_deep.yml").write_text("[" * 2000 + "]" * 2000 + "\n")
        result = list_pipeline_files(str(tmp_path), pipelines_only=False, cache=cache)
        assert result["success"] is True
        by_path = {f["path"]: f for f in result["files"]}
        assert by_path["good.yml"]["node_count"] == 1
        assert by_path["z_deep.yml"]["parse_errors"] == 1


class TestGetRemoteOutline:
    def test_parse_github_url(self):
        assert parse_github_url("https://github.com/owner/repo") == ("owner", "repo")
        assert parse_github_url("https://github.com/owner/repo.git") == ("owner", "repo")
        assert parse_github_url("owner/repo") == ("owner", "repo")

    def test_parse_github_url_invalid(self):
        with pytest.raises(ValueError):
            parse_github_url("not a url")

    @pytest.mark.asyncio
    async def test_blocked_in_local_only(self, monkeypatch, cache):
        monkeypatch.setenv("PIPEOUTLINE_LOCAL_ONLY", "true")
        result = await get_remote_outline("owner/repo", "azure-pipelines.yml", cache=cache)
        assert result["success"] is False
        assert "local-only" in result["error"].lower()

    @pytest.mark.asyncio
    async def test_sensitive_path_refused(self, monkeypatch, cache):
        monkeypatch.delenv("PIPEOUTLINE_LOCAL_ONLY", raising=False)
        result = await get_remote_outline("owner/repo", "deploy/secrets.yml", cache=cache)
        assert result["success"] is False
        assert "sensitive" in result["error"]
