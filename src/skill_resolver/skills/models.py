"""
Skill data models.

Loading is split into three tiers:
- SkillMetadata: name/description read at startup
- Skill: full instruction body, read when a request activates the skill
- SkillResource: a single referenced file, read on demand
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SKILL_FILENAME = "SKILL.md"
RESOURCE_DIRS = ("scripts", "references", "assets")

NAME_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024
MAX_COMPATIBILITY_LENGTH = 500


class ResourceKind(str, Enum):
	"""Kind of a resource file, derived from its top-level folder."""
	SCRIPT = "script"
	REFERENCE = "reference"
	ASSET = "asset"
	OTHER = "other"

	@classmethod
	def from_path(cls, relative_path: str) -> "ResourceKind":
		top = relative_path.replace("\\", "/").split("/", 1)[0]
		return {
			"scripts": cls.SCRIPT,
			"references": cls.REFERENCE,
			"assets": cls.ASSET,
		}.get(top, cls.OTHER)


@dataclass(frozen=True)
class SkillMetadata:
	"""Frontmatter of a skill; the only part kept in memory at startup."""
	name: str
	description: str
	path: Path
	license: str | None = None
	compatibility: str | None = None
	metadata: dict[str, str] = field(default_factory=dict)
	allowed_tools: tuple[str, ...] = ()

	@property
	def skill_file(self) -> Path:
		return self.path / SKILL_FILENAME

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"description": self.description,
			"path": str(self.path),
			"license": self.license,
			"compatibility": self.compatibility,
			"metadata": dict(self.metadata),
			"allowed_tools": list(self.allowed_tools),
		}


@dataclass(frozen=True)
class Skill:
	"""A fully loaded skill: metadata plus instruction body."""
	metadata: SkillMetadata
	instructions: str
	resources: tuple[str, ...] = ()

	@property
	def name(self) -> str:
		return self.metadata.name

	@property
	def description(self) -> str:
		return self.metadata.description

	@property
	def path(self) -> Path:
		return self.metadata.path


@dataclass(frozen=True)
class SkillResource:
	"""A file inside a skill folder, loaded on demand."""
	relative_path: str
	path: Path
	kind: ResourceKind
	content: str | None = None
	data: bytes | None = None

	@property
	def is_binary(self) -> bool:
		return self.content is None


def validate_metadata(frontmatter: dict, folder_name: str) -> list[str]:
	"""
	Check a frontmatter mapping against the skill naming rules.

	Returns:
		List of problems; empty when the metadata is well-formed.
	"""
	problems = []

	name = frontmatter.get("name")
	if not isinstance(name, str) or not name.strip():
		problems.append("missing 'name'")
	else:
		if len(name) > MAX_NAME_LENGTH:
			problems.append(f"name longer than {MAX_NAME_LENGTH} characters")
		if not NAME_RE.match(name):
			problems.append(f"name '{name}' must be lowercase letters, digits and single hyphens")
		if name != folder_name:
			problems.append(f"name '{name}' does not match folder '{folder_name}'")

	description = frontmatter.get("description")
	if not isinstance(description, str) or not description.strip():
		problems.append("missing 'description'")
	elif len(description) > MAX_DESCRIPTION_LENGTH:
		problems.append(f"description longer than {MAX_DESCRIPTION_LENGTH} characters")

	compatibility = frontmatter.get("compatibility")
	if compatibility is not None and len(str(compatibility)) > MAX_COMPATIBILITY_LENGTH:
		problems.append(f"compatibility longer than {MAX_COMPATIBILITY_LENGTH} characters")

	metadata = frontmatter.get("metadata")
	if metadata is not None and not isinstance(metadata, dict):
		problems.append("'metadata' must be a mapping")

	return problems
