"""Exceptions raised by skill-resolver."""


class SkillResolverError(Exception):
	"""Base class for all skill-resolver errors."""
	pass


class FrontmatterError(SkillResolverError):
	"""Raised when a Markdown file's YAML frontmatter cannot be parsed."""
	pass


class SkillNotFoundError(SkillResolverError):
	"""Raised when a skill name is not among the discovered skills."""
	pass


class SkillLoadError(SkillResolverError):
	"""Raised when a discovered skill can no longer be loaded."""
	pass


class ResourceNotFoundError(SkillResolverError):
	"""Raised when a skill references a resource file that does not exist."""
	pass


class ResourceAccessError(SkillResolverError):
	"""Raised when a resource path escapes its skill folder."""
	pass


class CommandNotFoundError(SkillResolverError):
	"""Raised when a command name is not among the discovered commands."""
	pass


class InstallError(SkillResolverError):
	"""Raised when install or uninstall cannot proceed."""
	pass
