"""
Commands - single-file prompt shortcuts invoked by name.

Commands are discovered from each configured root, typically:
- User: ~/.claude/commands/
- Project: .claude/commands/

A command is a Markdown file. Nested folders namespace the name with ':'
(git/commit.md -> git:commit). Frontmatter is optional:
```
---
description: Create a commit
argument-hint: [message]
allowed-tools: Bash(git add:*), Bash(git commit:*)
---

Commit staged changes with message: $ARGUMENTS
```
"""

import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import CommandNotFoundError, FrontmatterError
from .frontmatter import parse_frontmatter, split_frontmatter, split_list

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\$(\$|ARGUMENTS\b|[1-9])")
MAX_DESCRIPTION_LENGTH = 100


@dataclass(frozen=True)
class Command:
	"""A parsed command file."""
	name: str
	description: str
	prompt: str
	path: Path
	argument_hint: str | None = None
	allowed_tools: tuple[str, ...] = ()
	model: str | None = None

	def render(self, arguments: str | list[str] = "") -> str:
		"""
		Substitute placeholders in the prompt.

		$ARGUMENTS is replaced by the whole argument string, $1..$9 by
		positional arguments (shell-style split; missing ones become empty)
		and $$ by a literal dollar sign.
		"""
		if isinstance(arguments, str):
			whole = arguments.strip()
			try:
				positional = shlex.split(whole)
			except ValueError:
				positional = whole.split()
		else:
			positional = [str(a) for a in arguments]
			whole = " ".join(positional)

		def substitute(match: re.Match) -> str:
			token = match.group(1)
			if token == "$":
				return "$"
			if token == "ARGUMENTS":
				return whole
			index = int(token) - 1
			return positional[index] if index < len(positional) else ""

		return PLACEHOLDER_RE.sub(substitute, self.prompt)

	@property
	def placeholders(self) -> list[str]:
		"""Placeholders used in the prompt, in order of first appearance."""
		seen = []
		for match in PLACEHOLDER_RE.finditer(self.prompt):
			token = match.group(1)
			if token != "$" and f"${token}" not in seen:
				seen.append(f"${token}")
		return seen

	def referenced_skills(self, skill_names: Iterable[str]) -> list[str]:
		"""Skill names mentioned in the prompt text."""
		found = []
		for name in sorted(set(skill_names)):
			if re.search(rf"(?<![\w-]){re.escape(name)}(?![\w-])", self.prompt):
				found.append(name)
		return found

	def to_dict(self) -> dict:
		return {
			"name": self.name,
			"description": self.description,
			"argument_hint": self.argument_hint,
			"allowed_tools": list(self.allowed_tools),
			"model": self.model,
			"path": str(self.path),
		}


class CommandLoader:
	"""
	Discovers and loads commands from Markdown files.

	Roots are scanned in order; a command in a later root overrides one with
	the same name in an earlier root.
	"""

	def __init__(self, roots: list[Path | str]):
		self.roots = [Path(r).expanduser() for r in roots]
		self._commands_cache: dict[str, Command] = {}
		self._loaded = False

	def discover(self, reload: bool = False) -> dict[str, Command]:
		"""
		Discover all available commands.

		Args:
			reload: Force a rescan even if already cached

		Returns:
			Dict mapping command name to Command
		"""
		if self._loaded and not reload:
			return self._commands_cache

		found: dict[str, Command] = {}
		for root in self.roots:
			if not root.is_dir():
				continue
			for path in sorted(root.rglob("*.md")):
				relative = path.relative_to(root)
				if any(part.startswith(".") for part in relative.parts):
					continue
				command = self._load_command(path, relative)
				if command is None:
					continue
				if command.name in found:
					logger.info(f"Command '{command.name}' from {root} overrides {found[command.name].path}")
				found[command.name] = command

		self._commands_cache = found
		self._loaded = True
		logger.info(f"Discovered {len(found)} commands")
		return self._commands_cache

	def get_command(self, name: str) -> Command:
		"""
		Get a command by name.

		Raises:
			CommandNotFoundError: no command with that name
		"""
		commands = self.discover()
		name = name.lstrip("/")
		if name not in commands:
			raise CommandNotFoundError(f"Command not found: {name}")
		return commands[name]

	def list_commands(self) -> list[dict]:
		commands = self.discover()
		return [commands[name].to_dict() for name in sorted(commands)]

	def _load_command(self, path: Path, relative: Path) -> Command | None:
		name = ":".join(relative.with_suffix("").parts)
		try:
			content = path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as e:
			logger.warning(f"Skipping command {name}: {e}")
			return None

		frontmatter_text, body = split_frontmatter(content)
		frontmatter: dict = {}
		if frontmatter_text is not None:
			try:
				frontmatter, body = parse_frontmatter(content, str(path))
			except FrontmatterError as e:
				logger.warning(f"Skipping command {name}: {e}")
				return None

		body = body.strip()
		description = frontmatter.get("description")
		if not isinstance(description, str) or not description.strip():
			description = _first_line(body)

		hint = frontmatter.get("argument-hint")
		if isinstance(hint, list):
			# unquoted "[message]" parses as a YAML flow sequence
			hint = " ".join(f"[{h}]" for h in hint)
		model = frontmatter.get("model")
		return Command(
			name=name,
			description=description.strip(),
			prompt=body,
			path=path,
			argument_hint=str(hint) if hint is not None else None,
			allowed_tools=tuple(split_list(frontmatter.get("allowed-tools"))),
			model=str(model) if model is not None else None,
		)


def _first_line(body: str) -> str:
	for line in body.splitlines():
		line = line.strip().lstrip("#").strip()
		if line:
			if len(line) > MAX_DESCRIPTION_LENGTH:
				return line[:MAX_DESCRIPTION_LENGTH - 3] + "..."
			return line
	return ""
