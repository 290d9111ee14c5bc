"""Shared fixtures for skill-resolver tests."""

import logging
from pathlib import Path

import pytest

from tests.helpers import write_command, write_skill

SKILLS = {
	"code-review": (
		"Review code changes and pull requests for bugs, security issues and style problems. "
		"Use when asked to review a PR or a diff."
	),
	"spring-boot-service": (
		"Write Spring Boot services in Java with layered controllers, services and repositories. "
		"Use when creating REST endpoints or JPA entities."
	),
	"kotlin-style": (
		"Kotlin coding style guide covering naming, null safety, coroutines and idiomatic collections. "
		"Use when writing or refactoring Kotlin code."
	),
	"typescript-react": (
		"Build TypeScript React components with hooks, strict typing and testing library tests."
	),
}


@pytest.fixture(autouse=True)
def _reset_package_logger():
	"""CLI runs attach handlers to the package logger; drop them between tests."""
	yield
	logger = logging.getLogger("skill_resolver")
	for handler in list(logger.handlers):
		logger.removeHandler(handler)
		handler.close()


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
	"""A skills root holding four well-formed skills."""
	root = tmp_path / "skills"
	for name, description in SKILLS.items():
		write_skill(root, name, description, body=f"# {name}\n\nFollow the {name} checklist.")
	return root


@pytest.fixture
def commands_root(tmp_path: Path) -> Path:
	root = tmp_path / "commands"
	write_command(
		root,
		"review",
		"Review the current diff with the code-review skill: $ARGUMENTS",
		frontmatter={"description": "Review changes", "argument-hint": "[focus]"},
	)
	write_command(root, "git/commit", "Commit staged files with message $1 on branch $2")
	return root
