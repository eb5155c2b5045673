"""Editor options and their loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from enum import StrEnum, auto
from pathlib import Path

from ._errors import ConfigError


class IdStrategy(StrEnum):
    """How new node, edge and node type ids are minted."""

    RANDOM = auto()  # Random base-36 strings
    COUNTER = auto()  # Prefix followed by a monotonically increasing integer


@dataclass(slots=True, frozen=True)
class EditorOptions:
    """Options of one editor session.

    Attributes:
        enable_cycle_checking: Reject connections that would close a cycle.
        id_strategy: How new ids are minted.
        id_length: Length of random ids.
        id_prefix: Prefix of counter ids.

    """

    enable_cycle_checking: bool = False
    id_strategy: IdStrategy = IdStrategy.RANDOM
    id_length: int = 20
    id_prefix: str = ""


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _expect[T](section: dict[str, object], key: str, kind: type[T], default: T) -> T:
    if key not in section:
        return default
    value = section[key]
    # bool is an int subclass; keep "id_length = true" from slipping through
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        msg = f"Invalid [tool.blendnodes].{key}: expected {kind.__name__}, got {type(value).__name__}"
        raise ConfigError(msg)
    return value


def options_from_mapping(section: dict[str, object]) -> EditorOptions:
    """Validate a ``[tool.blendnodes]`` table and turn it into EditorOptions.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.

    """
    unknown = set(section) - {"enable_cycle_checking", "id_strategy", "id_length", "id_prefix"}
    if unknown:
        msg = f"Unknown [tool.blendnodes] key(s): {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    strategy_value = _expect(section, "id_strategy", str, str(IdStrategy.RANDOM))
    try:
        strategy = IdStrategy(strategy_value)
    except ValueError:
        choices = ", ".join(repr(s.value) for s in IdStrategy)
        msg = f"Invalid [tool.blendnodes].id_strategy '{strategy_value}'. Expected one of: {choices}"
        raise ConfigError(msg) from None

    id_length = _expect(section, "id_length", int, 20)
    if id_length < 8:
        msg = f"Invalid [tool.blendnodes].id_length: {id_length} is too short (minimum 8)"
        raise ConfigError(msg)

    return EditorOptions(
        enable_cycle_checking=_expect(section, "enable_cycle_checking", bool, False),
        id_strategy=strategy,
        id_length=id_length,
        id_prefix=_expect(section, "id_prefix", str, ""),
    )


def load_config(pyproject_path: Path) -> EditorOptions:
    """Load and validate [tool.blendnodes] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed EditorOptions (defaults when the section is absent)

    Raises:
        ConfigError: If the configuration is invalid

    """
    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("blendnodes", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.blendnodes] configuration. Expected a table."
        raise ConfigError(msg)
    return options_from_mapping(section)


def get_config() -> EditorOptions:
    """Get options from pyproject.toml in current directory or parents.

    Returns:
        EditorOptions (defaults if no pyproject.toml or no [tool.blendnodes] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return EditorOptions()
    return load_config(pyproject_path)
