"""Shared test helpers for skill-resolver tests."""

from pathlib import Path

import yaml


def write_skill(
	root: Path,
	name: str,
	description: str,
	body: str = "# Instructions\n",
	folder: str | None = None,
	extra: dict | None = None,
) -> Path:
	"""Create <root>/<folder or name>/SKILL.md and return the skill folder."""
	skill_dir = root / (folder or name)
	skill_dir.mkdir(parents=True, exist_ok=True)
	frontmatter = {"name": name, "description": description, **(extra or {})}
	text = "---\n" + yaml.safe_dump(frontmatter, sort_keys=False) + "---\n\n" + body
	(skill_dir / "SKILL.md").write_text(text, encoding="utf-8")
	return skill_dir


def write_command(root: Path, name: str, prompt: str, frontmatter: dict | None = None) -> Path:
	"""Create <root>/<name>.md, with optional frontmatter."""
	path = root / f"{name}.md"
	path.parent.mkdir(parents=True, exist_ok=True)
	text = prompt + "\n"
	if frontmatter:
		text = "---\n" + yaml.safe_dump(frontmatter, sort_keys=False) + "---\n\n" + text
	path.write_text(text, encoding="utf-8")
	return path


def snapshot(root: Path) -> list[tuple] | None:
	"""Every path under root with its type and content, for before/after comparisons."""
	if not root.exists():
		return None
	entries = []
	for path in sorted(root.rglob("*")):
		rel = path.relative_to(root).as_posix()
		if path.is_symlink():
			entries.append((rel, "link", str(path.readlink())))
		elif path.is_dir():
			entries.append((rel, "dir", None))
		else:
			entries.append((rel, "file", path.read_bytes()))
	return entries
