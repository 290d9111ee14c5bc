"""skill-resolver: discover, match and install agent skills and commands."""

from .commands import Command, CommandLoader
from .config import Config, get_config, load_config
from .errors import (
	CommandNotFoundError,
	FrontmatterError,
	InstallError,
	ResourceAccessError,
	ResourceNotFoundError,
	SkillLoadError,
	SkillNotFoundError,
	SkillResolverError,
)
from .installer import Installer, InstallMode
from .skills import Resolution, Skill, SkillLoader, SkillMetadata, SkillResolver

__all__ = [
	"Command",
	"CommandLoader",
	"Config",
	"get_config",
	"load_config",
	"CommandNotFoundError",
	"FrontmatterError",
	"InstallError",
	"ResourceAccessError",
	"ResourceNotFoundError",
	"SkillLoadError",
	"SkillNotFoundError",
	"SkillResolverError",
	"Installer",
	"InstallMode",
	"Resolution",
	"Skill",
	"SkillLoader",
	"SkillMetadata",
	"SkillResolver",
]
