"""Tests for the configuration module."""

from pathlib import Path

import pytest

from blendnodes import ConfigError, EditorOptions, IdStrategy
from blendnodes._config import find_pyproject_toml, get_config, load_config


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject


class TestLoadConfig:
    """Tests for reading [tool.blendnodes]."""

    def test_missing_section_gives_defaults(self, tmp_path: Path) -> None:
        """Should return default options without a [tool.blendnodes] section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert load_config(pyproject) == EditorOptions()

    def test_all_keys(self, tmp_path: Path) -> None:
        """Should parse every supported key."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.blendnodes]
enable_cycle_checking = true
id_strategy = "counter"
id_prefix = "n"
id_length = 32
""",
        )

        assert load_config(pyproject) == EditorOptions(
            enable_cycle_checking=True,
            id_strategy=IdStrategy.COUNTER,
            id_length=32,
            id_prefix="n",
        )

    @pytest.mark.parametrize(
        ("body", "match"),
        [
            ("colour = 'red'", "Unknown"),
            ("id_strategy = 'uuid'", "id_strategy 'uuid'"),
            ("id_length = 4", "too short"),
            ("id_length = true", "expected int"),
            ("enable_cycle_checking = 'yes'", "expected bool"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, match: str) -> None:
        """Should raise ConfigError on bad keys or values."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.blendnodes]\n{body}\n")

        with pytest.raises(ConfigError, match=match):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Should wrap TOML syntax errors."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.blendnodes\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)

    def test_section_must_be_a_table(self, tmp_path: Path) -> None:
        """Should reject a non-table [tool.blendnodes] value."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool]\nblendnodes = 1\n")

        with pytest.raises(ConfigError, match="Expected a table"):
            load_config(pyproject)


def test_get_config_searches_upwards(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.blendnodes]\nid_strategy = 'counter'\n")
    subdir = tmp_path / "work"
    subdir.mkdir()
    monkeypatch.chdir(subdir)

    assert get_config().id_strategy is IdStrategy.COUNTER
