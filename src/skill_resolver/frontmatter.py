"""
Frontmatter parsing for SKILL.md and command files.

Expected format:
```
---
name: skill-name
description: Brief description
---

# Body
[Markdown...]
```
"""

import re

import yaml

from .errors import FrontmatterError

FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n(.*))?$", re.DOTALL)
# "Read, Grep" and "Read Bash(git add:*)" both tokenize per tool
TOOL_TOKEN_RE = re.compile(r"[^\s,(]+(?:\([^)]*\))?")


def split_frontmatter(content: str) -> tuple[str | None, str]:
	"""
	Split a Markdown document into its frontmatter text and body.

	Returns:
		(frontmatter_text, body). frontmatter_text is None when the
		document has no frontmatter block.
	"""
	content = content.lstrip("\ufeff")
	match = FRONTMATTER_RE.match(content)
	if not match:
		return None, content
	return match.group(1), (match.group(2) or "").strip()


def parse_frontmatter(content: str, source: str = "<string>") -> tuple[dict, str]:
	"""
	Parse YAML frontmatter into a dict and return it with the body.

	Raises:
		FrontmatterError: no frontmatter block, invalid YAML, or a
			frontmatter that is not a mapping
	"""
	frontmatter_text, body = split_frontmatter(content)
	if frontmatter_text is None:
		raise FrontmatterError(f"No frontmatter found in {source}")

	try:
		data = yaml.safe_load(frontmatter_text)
	except yaml.YAMLError as e:
		raise FrontmatterError(f"Invalid YAML frontmatter in {source}: {e}") from e

	if data is None:
		raise FrontmatterError(f"Empty frontmatter in {source}")
	if not isinstance(data, dict):
		raise FrontmatterError(f"Frontmatter in {source} must be a mapping")

	return data, body


def split_list(raw) -> list[str]:
	"""Normalize a comma/space separated string or a YAML list into a list of strings."""
	if raw is None:
		return []
	if isinstance(raw, str):
		return TOOL_TOKEN_RE.findall(raw)
	if isinstance(raw, (list, tuple)):
		return [str(t).strip() for t in raw if str(t).strip()]
	return []
