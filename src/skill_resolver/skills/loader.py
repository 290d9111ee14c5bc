"""
Skill Loader - Discovers and parses skills from SKILL.md files.

Skills are discovered from each configured root, typically:
- User: ~/.claude/skills/
- Project: .claude/skills/

Discovery reads frontmatter only. Instruction bodies and resource files are
read when a skill is activated.
"""

import logging
import re
from pathlib import Path

from ..errors import (
	FrontmatterError,
	ResourceAccessError,
	ResourceNotFoundError,
	SkillLoadError,
	SkillNotFoundError,
)
from ..frontmatter import parse_frontmatter, split_list
from .models import (
	RESOURCE_DIRS,
	SKILL_FILENAME,
	ResourceKind,
	Skill,
	SkillMetadata,
	SkillResource,
	validate_metadata,
)

logger = logging.getLogger(__name__)

BARE_RESOURCE_RE = re.compile(
	r"(?<![\w/.-])(?:\./)?((?:" + "|".join(RESOURCE_DIRS) + r")/[\w./-]*[\w-])"
)
MARKDOWN_LINK_RE = re.compile(r"\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


class SkillLoader:
	"""
	Discovers and loads skills from SKILL.md files.

	Roots are scanned in order; a skill in a later root overrides one with
	the same name in an earlier root.
	"""

	def __init__(self, roots: list[Path | str]):
		"""
		Initialize the skill loader.

		Args:
			roots: Skill root directories, lowest precedence first
		"""
		self.roots = [Path(r).expanduser() for r in roots]
		self._metadata_cache: dict[str, SkillMetadata] = {}
		self._loaded = False

	def discover(self, reload: bool = False) -> dict[str, SkillMetadata]:
		"""
		Discover all available skills (metadata only).

		Args:
			reload: Force a rescan even if already cached

		Returns:
			Dict mapping skill name to SkillMetadata
		"""
		if self._loaded and not reload:
			return self._metadata_cache

		found: dict[str, SkillMetadata] = {}
		for root in self.roots:
			if not root.is_dir():
				logger.debug(f"Skill root does not exist: {root}")
				continue
			for skill_dir in sorted(root.iterdir()):
				if not skill_dir.is_dir() or skill_dir.name.startswith("."):
					continue
				metadata = self._read_metadata(skill_dir)
				if metadata is None:
					continue
				if metadata.name in found:
					logger.info(f"Skill '{metadata.name}' from {root} overrides {found[metadata.name].path}")
				found[metadata.name] = metadata
				logger.debug(f"Loaded skill metadata: {metadata.name}")

		self._metadata_cache = found
		self._loaded = True
		logger.info(f"Discovered {len(found)} skills")

		return self._metadata_cache

	def get_metadata(self, name: str) -> SkillMetadata | None:
		if not self._loaded:
			self.discover()
		return self._metadata_cache.get(name)

	def list_skills(self) -> list[dict]:
		"""
		List all available skills with basic info.

		Returns:
			List of skill summaries sorted by name
		"""
		if not self._loaded:
			self.discover()

		return [
			self._metadata_cache[name].to_dict()
			for name in sorted(self._metadata_cache)
		]

	def load_skill(self, name: str) -> Skill:
		"""
		Load a skill's full instructions.

		Raises:
			SkillNotFoundError: name is not a discovered skill
			SkillLoadError: SKILL.md is gone or no longer parses
		"""
		metadata = self.get_metadata(name)
		if metadata is None:
			raise SkillNotFoundError(f"Skill not found: {name}")

		try:
			content = metadata.skill_file.read_text(encoding="utf-8")
			_, instructions = parse_frontmatter(content, str(metadata.skill_file))
		except (OSError, UnicodeDecodeError, FrontmatterError) as e:
			raise SkillLoadError(f"Failed to load skill '{name}': {e}") from e

		logger.debug(f"Loaded skill instructions: {name}")
		return Skill(
			metadata=metadata,
			instructions=instructions,
			resources=tuple(find_resource_references(instructions)),
		)

	def load_resource(self, skill: Skill | SkillMetadata, relative_path: str) -> SkillResource:
		"""
		Load a single file from a skill folder.

		Raises:
			ResourceAccessError: path escapes the skill folder
			ResourceNotFoundError: file does not exist
		"""
		metadata = skill.metadata if isinstance(skill, Skill) else skill
		base = metadata.path.resolve()
		target = (metadata.path / relative_path).resolve()

		if not target.is_relative_to(base):
			raise ResourceAccessError(
				f"Resource '{relative_path}' is outside skill '{metadata.name}'"
			)
		if not target.is_file():
			raise ResourceNotFoundError(
				f"Skill '{metadata.name}' references missing resource: {relative_path}"
			)

		data = target.read_bytes()
		try:
			content = data.decode("utf-8")
			data = None
		except UnicodeDecodeError:
			content = None

		return SkillResource(
			relative_path=relative_path,
			path=target,
			kind=ResourceKind.from_path(relative_path),
			content=content,
			data=data,
		)

	def load_resources(self, skill: Skill) -> list[SkillResource]:
		"""Load every resource the skill's instructions reference."""
		return [self.load_resource(skill, rel) for rel in skill.resources]

	def list_resource_files(self, skill: Skill | SkillMetadata) -> list[str]:
		"""List files under the skill's scripts/, references/ and assets/ folders."""
		metadata = skill.metadata if isinstance(skill, Skill) else skill
		files = []
		for dirname in RESOURCE_DIRS:
			folder = metadata.path / dirname
			if not folder.is_dir():
				continue
			for path in sorted(folder.rglob("*")):
				if path.is_file():
					files.append(path.relative_to(metadata.path).as_posix())
		return files

	def create_skill_template(self, name: str, root: Path | None = None) -> Path:
		"""
		Create a skill template directory.

		Args:
			name: Skill name
			root: Root to create it in (default: the highest-precedence root)

		Returns:
			Path to created SKILL.md file
		"""
		problems = validate_metadata({"name": name, "description": "placeholder"}, name)
		if problems:
			raise ValueError(f"Invalid skill name '{name}': {'; '.join(problems)}")

		base_path = root or self.roots[-1]
		skill_dir = base_path / name
		skill_file = skill_dir / SKILL_FILENAME
		if skill_file.exists():
			raise FileExistsError(f"Skill already exists: {skill_file}")
		skill_dir.mkdir(parents=True, exist_ok=True)

		template = f"""---
name: {name}
description: Brief description of what this skill does and when to use it
---

# {name.replace("-", " ").title()}

## Overview
[Describe what this skill accomplishes]

## Instructions
[Step-by-step instructions to follow]

## Resources
[Reference files as relative paths, e.g. references/guide.md]
"""

		skill_file.write_text(template, encoding="utf-8")
		logger.info(f"Created skill template at {skill_file}")

		# Invalidate cache
		self._loaded = False

		return skill_file

	def _read_metadata(self, skill_dir: Path) -> SkillMetadata | None:
		"""Read and validate a skill folder's frontmatter; None if it is unusable."""
		skill_file = skill_dir / SKILL_FILENAME
		if not skill_file.is_file():
			logger.debug(f"No {SKILL_FILENAME} in {skill_dir}")
			return None

		try:
			content = skill_file.read_text(encoding="utf-8")
			frontmatter, _ = parse_frontmatter(content, str(skill_file))
		except (OSError, UnicodeDecodeError, FrontmatterError) as e:
			logger.warning(f"Skipping skill {skill_dir.name}: {e}")
			return None

		problems = validate_metadata(frontmatter, skill_dir.name)
		if problems:
			logger.warning(f"Skipping skill {skill_dir.name}: {'; '.join(problems)}")
			return None

		raw_metadata = frontmatter.get("metadata") or {}
		compatibility = frontmatter.get("compatibility")
		license_ = frontmatter.get("license")

		return SkillMetadata(
			name=frontmatter["name"],
			description=frontmatter["description"].strip(),
			path=skill_dir,
			license=str(license_) if license_ is not None else None,
			compatibility=str(compatibility) if compatibility is not None else None,
			metadata={str(k): str(v) for k, v in raw_metadata.items()},
			allowed_tools=tuple(split_list(frontmatter.get("allowed-tools"))),
		)


def find_resource_references(instructions: str) -> list[str]:
	"""
	Find relative resource paths mentioned in a skill body.

	Picks up bare mentions such as `scripts/extract.py` and relative Markdown
	link targets. URLs, anchors, absolute paths and parent references are
	ignored.
	"""
	refs: list[str] = []

	def add(target: str) -> None:
		target = target.split("#", 1)[0].strip()
		if target.startswith("./"):
			target = target[2:]
		if (
			not target
			or target.endswith("/")
			or target.startswith("/")
			or URL_RE.match(target)
			or ".." in Path(target).parts
			or target == SKILL_FILENAME
		):
			return
		if target not in refs:
			refs.append(target)

	for match in MARKDOWN_LINK_RE.finditer(instructions):
		add(match.group(1))
	for match in BARE_RESOURCE_RE.finditer(instructions):
		add(match.group(1))

	return refs
