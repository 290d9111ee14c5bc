"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "skill-resolver"
APP_AUTHOR = "skill-resolver"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Where the host agent looks for installed skills and commands
	claude_home: Path = field(default_factory=lambda: Path.home() / ".claude")
	project_path: Path = field(default_factory=Path.cwd)

	# Derived paths
	skills_dir: Path = field(init=False)
	commands_dir: Path = field(init=False)
	project_skills_dir: Path = field(init=False)
	project_commands_dir: Path = field(init=False)
	manifest_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# Matching
	relevance_threshold: float = 0.2
	ambiguity_margin: float = 0.05
	min_keyword_hits: int = 1

	def __post_init__(self) -> None:
		self.skills_dir = self.claude_home / "skills"
		self.commands_dir = self.claude_home / "commands"
		self.project_skills_dir = self.project_path / ".claude" / "skills"
		self.project_commands_dir = self.project_path / ".claude" / "commands"
		self.manifest_path = self.data_dir / "install_manifest.json"
		self.log_dir = self.data_dir / "logs"

	@property
	def skill_roots(self) -> list[Path]:
		"""Skill roots in precedence order (later overrides earlier)."""
		return [self.skills_dir, self.project_skills_dir]

	@property
	def command_roots(self) -> list[Path]:
		return [self.commands_dir, self.project_commands_dir]

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


PATH_FIELDS = {"config_dir", "data_dir", "claude_home", "project_path"}
FLOAT_FIELDS = {"relevance_threshold", "ambiguity_margin"}
INT_FIELDS = {"min_keyword_hits"}


def _coerce(key: str, val):
	if key in PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if key in FLOAT_FIELDS:
		return float(val)
	if key in INT_FIELDS:
		return int(val)
	return val


def _apply_env_overrides(config: Config) -> Config:
	"""Apply SKILL_RESOLVER_* environment variable overrides."""
	env_map = {
		"SKILL_RESOLVER_CONFIG_DIR": "config_dir",
		"SKILL_RESOLVER_DATA_DIR": "data_dir",
		"SKILL_RESOLVER_CLAUDE_HOME": "claude_home",
		"SKILL_RESOLVER_PROJECT_PATH": "project_path",
		"SKILL_RESOLVER_RELEVANCE_THRESHOLD": "relevance_threshold",
		"SKILL_RESOLVER_AMBIGUITY_MARGIN": "ambiguity_margin",
		"SKILL_RESOLVER_MIN_KEYWORD_HITS": "min_keyword_hits",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	settable = PATH_FIELDS | FLOAT_FIELDS | INT_FIELDS
	for key, val in data.items():
		if key in settable:
			setattr(config, key, _coerce(key, val))

	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# config_dir itself may come from the environment
	config = _apply_env_overrides(config)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
