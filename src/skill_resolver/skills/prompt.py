"""Prompt formatting for skill catalogs and activated skills."""

from html import escape
from typing import Iterable

from .models import Skill, SkillMetadata, SkillResource


def render_catalog(skills: Iterable[SkillMetadata]) -> str:
	"""
	Format skill metadata for injection into a system prompt.

	Only names, descriptions and locations are included; the body of a
	skill is loaded when it is activated.
	"""
	lines = ["<available_skills>"]
	for meta in sorted(skills, key=lambda m: m.name):
		lines.extend([
			"<skill>",
			f"<name>{escape(meta.name)}</name>",
			f"<description>{escape(meta.description)}</description>",
			f"<location>{escape(str(meta.skill_file))}</location>",
			"</skill>",
		])
	lines.append("</available_skills>")
	return "\n".join(lines)


def render_activation(
	skill: Skill,
	resources: Iterable[SkillResource] = (),
	request: str | None = None,
) -> str:
	"""Format an activated skill's instructions as a prompt."""
	prompt_parts = [
		f"# Skill: {skill.name}",
		"",
		f"**Description**: {skill.description}",
		f"**Location**: {skill.path}",
		"",
	]

	if skill.metadata.allowed_tools:
		tools_list = ", ".join(skill.metadata.allowed_tools)
		prompt_parts.extend([
			"## Allowed Tools",
			f"You may ONLY use the following tools for this skill: {tools_list}",
			"",
		])

	prompt_parts.extend([
		"## Instructions",
		"",
		skill.instructions,
	])

	loaded = [r for r in resources if not r.is_binary]
	if loaded:
		prompt_parts.extend(["", "## Resources"])
		for resource in loaded:
			prompt_parts.extend([
				"",
				f"### {resource.relative_path}",
				"",
				"```",
				resource.content.rstrip("\n"),
				"```",
			])

	if request:
		prompt_parts.extend([
			"",
			"## Request",
			request,
		])

	return "\n".join(prompt_parts)
