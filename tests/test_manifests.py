"""
Tests for package name resolution (update_bin/manifests.py).
"""

import json
import os
import subprocess
from unittest.mock import patch

import pytest

from update_bin.manifests import (
    bun_global_dir,
    declares_binary,
    find_package_for_binary,
    homebrew_package_name,
    npm_global_node_modules,
    read_manifest,
    resolve_package_name,
)


def completed(stdout="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


def write_package(root, name, bin_field=None, dependencies=None):
    """Write <root>/<name>/package.json and return its path."""
    package_dir = root / name
    package_dir.mkdir(parents=True, exist_ok=True)
    manifest = {"name": name, "version": "1.0.0"}
    if bin_field is not None:
        manifest["bin"] = bin_field
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    path = package_dir / "package.json"
    path.write_text(json.dumps(manifest))
    return str(path)


class TestReadManifest:
    """Tests for manifest parsing."""

    def test_valid(self, tmp_path):
        path = write_package(tmp_path, "tool", bin_field="tool")
        assert read_manifest(path)["bin"] == "tool"

    def test_missing(self, tmp_path):
        """Test a missing manifest reads as empty."""
        assert read_manifest(str(tmp_path / "nope" / "package.json")) == {}

    def test_malformed(self, tmp_path):
        """Test invalid JSON reads as empty."""
        path = tmp_path / "package.json"
        path.write_text("{not json")
        assert read_manifest(str(path)) == {}

    def test_non_object(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text('["a", "b"]')
        assert read_manifest(str(path)) == {}


class TestDeclaresBinary:
    """Tests for the bin field check."""

    def test_string_bin_matches(self):
        assert declares_binary({"bin": "tsc"}, "tsc") is True

    def test_string_bin_mismatch(self):
        assert declares_binary({"bin": "tsc"}, "tsserver") is False

    def test_mapping_bin(self):
        manifest = {"bin": {"tsc": "./bin/tsc", "tsserver": "./bin/tsserver"}}
        assert declares_binary(manifest, "tsserver") is True
        assert declares_binary(manifest, "node") is False

    def test_no_bin(self):
        assert declares_binary({}, "tsc") is False
        assert declares_binary({"bin": 42}, "tsc") is False


class TestFindPackageForBinary:
    """Tests for the shared manifest scan."""

    def test_first_match_wins(self, tmp_path):
        first = write_package(tmp_path, "typescript", bin_field={"tsc": "bin/tsc"})
        second = write_package(tmp_path, "other", bin_field={"tsc": "bin/tsc"})
        candidates = [("typescript", first), ("other", second)]
        assert find_package_for_binary("tsc", candidates) == "typescript"

    def test_skips_broken_manifests(self, tmp_path):
        broken = tmp_path / "broken" / "package.json"
        broken.parent.mkdir()
        broken.write_text("garbage")
        good = write_package(tmp_path, "cowsay", bin_field={"cowsay": "cli.js", "cowthink": "cli.js"})
        candidates = [("broken", str(broken)), ("missing", str(tmp_path / "x.json")), ("cowsay", good)]
        assert find_package_for_binary("cowthink", candidates) == "cowsay"

    def test_no_match(self, tmp_path):
        path = write_package(tmp_path, "cowsay", bin_field="cowsay")
        assert find_package_for_binary("tsc", [("cowsay", path)]) is None

    def test_empty_candidates(self):
        assert find_package_for_binary("tsc", []) is None


class TestNpmResolver:
    """Tests for npm package name resolution."""

    @patch("update_bin.manifests.run_command")
    @patch("update_bin.manifests.shutil.which")
    def test_resolves_from_global_node_modules(self, mock_which, mock_run, tmp_path):
        prefix = tmp_path / "prefix"
        (prefix / "bin").mkdir(parents=True)
        node_modules = prefix / "lib" / "node_modules"
        write_package(node_modules, "typescript", bin_field={"tsc": "bin/tsc", "tsserver": "bin/tsserver"})
        write_package(node_modules, "npm", bin_field={"npm": "bin/npm-cli.js"})

        mock_which.return_value = str(prefix / "bin" / "npm")
        mock_run.return_value = completed(json.dumps({
            "dependencies": {"npm": {"version": "10.0.0"}, "typescript": {"version": "5.4.0"}},
        }))

        with patch("update_bin.manifests.os.name", "posix"):
            assert resolve_package_name("npm", "tsserver") == "typescript"

    @patch("update_bin.manifests.shutil.which", return_value=None)
    def test_npm_missing_falls_back(self, mock_which):
        assert resolve_package_name("npm", "tsc") == "tsc"

    @patch("update_bin.manifests.run_command")
    @patch("update_bin.manifests.shutil.which", return_value="/usr/lib/node/bin/npm")
    def test_invalid_listing_falls_back(self, mock_which, mock_run):
        mock_run.return_value = completed("npm ERR! something")
        assert resolve_package_name("npm", "tsc") == "tsc"

    @patch("update_bin.manifests.shutil.which", return_value="/opt/node/bin/npm")
    def test_global_node_modules_posix(self, mock_which):
        with patch("update_bin.manifests.os.name", "posix"):
            assert npm_global_node_modules() == os.path.join("/opt/node", "lib", "node_modules")


class TestPnpmResolver:
    """Tests for pnpm package name resolution."""

    @patch("update_bin.manifests.run_command")
    def test_resolves_from_package_paths(self, mock_run, tmp_path):
        path = write_package(tmp_path, "real-pkg", bin_field={"short": "cli.js"})
        mock_run.return_value = completed(json.dumps([
            {"path": str(tmp_path), "dependencies": {
                "real-pkg": {"version": "2.0.0", "path": os.path.dirname(path)},
            }},
        ]))
        assert resolve_package_name("pnpm", "short") == "real-pkg"

    @patch("update_bin.manifests.run_command", return_value=None)
    def test_pnpm_missing_falls_back(self, mock_run):
        assert resolve_package_name("pnpm", "short") == "short"

    @patch("update_bin.manifests.run_command")
    def test_entries_without_path_skipped(self, mock_run):
        mock_run.return_value = completed(json.dumps([{"dependencies": {"pkg": {"version": "1.0.0"}}}]))
        assert resolve_package_name("pnpm", "short") == "short"


class TestYarnResolver:
    """Tests for yarn package name resolution."""

    @patch("update_bin.manifests.run_command")
    def test_resolves_from_global_dir(self, mock_run, tmp_path):
        global_dir = tmp_path / "yarn-global"
        global_dir.mkdir()
        (global_dir / "package.json").write_text(json.dumps({"dependencies": {"@vue/cli": "^5.0.0"}}))
        write_package(global_dir / "node_modules", "@vue/cli", bin_field={"vue": "bin/vue.js"})
        mock_run.return_value = completed(f"{global_dir}\n")

        assert resolve_package_name("yarn", "vue") == "@vue/cli"
        mock_run.assert_called_once_with(["yarn", "global", "dir"], False)

    @patch("update_bin.manifests.run_command")
    def test_yarn_failure_falls_back(self, mock_run):
        mock_run.return_value = completed("", returncode=1)
        assert resolve_package_name("yarn", "vue") == "vue"


class TestBunResolver:
    """Tests for bun package name resolution."""

    def test_resolves_from_bun_install(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BUN_INSTALL", str(tmp_path))
        global_dir = tmp_path / "install" / "global"
        global_dir.mkdir(parents=True)
        (global_dir / "package.json").write_text(json.dumps({"dependencies": {"cowsay": "^1.6.0"}}))
        write_package(global_dir / "node_modules", "cowsay", bin_field={"cowsay": "cli.js", "cowthink": "cli.js"})

        with patch("update_bin.manifests.os.name", "posix"):
            assert resolve_package_name("bun", "cowthink") == "cowsay"

    def test_global_dir_default(self, monkeypatch):
        monkeypatch.delenv("BUN_INSTALL", raising=False)
        with patch("update_bin.manifests.os.name", "posix"):
            assert bun_global_dir().endswith(os.path.join(".bun", "install", "global"))

    def test_missing_global_dir_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BUN_INSTALL", str(tmp_path / "nothing"))
        with patch("update_bin.manifests.os.name", "posix"):
            assert resolve_package_name("bun", "cowthink") == "cowthink"


class TestHomebrewResolver:
    """Tests for Homebrew formula resolution."""

    @patch("update_bin.manifests.run_command")
    def test_first_installed_candidate(self, mock_run):
        outputs = {
            ("brew", "list", "--formula"): completed("fd\nripgrep\ngit\n"),
            ("brew", "which-formula", "rg"): completed("ripgrep-all\nripgrep\n"),
        }
        mock_run.side_effect = lambda args, verbose=False: outputs[tuple(args)]
        assert homebrew_package_name("rg") == "ripgrep"
        assert resolve_package_name("homebrew", "rg") == "ripgrep"

    @patch("update_bin.manifests.run_command")
    def test_which_formula_error(self, mock_run):
        outputs = {
            ("brew", "list", "--formula"): completed("ripgrep\n"),
            ("brew", "which-formula", "rg"): completed("Error: Unknown command: which-formula"),
        }
        mock_run.side_effect = lambda args, verbose=False: outputs[tuple(args)]
        assert resolve_package_name("homebrew", "rg") == "rg"

    @patch("update_bin.manifests.run_command", return_value=None)
    def test_brew_missing(self, mock_run):
        assert resolve_package_name("homebrew", "rg") == "rg"


class TestResolvePackageName:
    """Tests for dispatch."""

    @patch("update_bin.manifests.run_command")
    def test_cargo_identity(self, mock_run):
        """Test managers without a resolver keep the binary name."""
        assert resolve_package_name("cargo", "rg") == "rg"
        mock_run.assert_not_called()
