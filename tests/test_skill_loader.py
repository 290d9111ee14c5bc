"""Tests for skill discovery and progressive loading."""

import logging
from pathlib import Path

import pytest

from skill_resolver.errors import (
	ResourceAccessError,
	ResourceNotFoundError,
	SkillLoadError,
	SkillNotFoundError,
)
from skill_resolver.skills import ResourceKind, SkillLoader, SkillMetadata, find_resource_references
from tests.conftest import SKILLS
from tests.helpers import write_skill


class TestDiscover:
	def test_discovers_well_formed_skills(self, skills_root: Path):
		"""Every well-formed skill folder should be discovered."""
		loader = SkillLoader([skills_root])
		found = loader.discover()
		assert sorted(found) == sorted(SKILLS)
		for name, meta in found.items():
			assert meta.description == SKILLS[name]
			assert meta.path == skills_root / name

	def test_metadata_has_no_instruction_body(self, skills_root: Path):
		"""Startup keeps name and description, never the body."""
		meta = SkillLoader([skills_root]).discover()["code-review"]
		assert isinstance(meta, SkillMetadata)
		assert not hasattr(meta, "instructions")
		assert "checklist" not in repr(meta)

	def test_optional_fields(self, tmp_path: Path):
		"""license, compatibility, metadata and allowed-tools should be read."""
		root = tmp_path / "skills"
		write_skill(root, "pdf-tools", "Work with PDF files", extra={
			"license": "MIT",
			"compatibility": "Requires poppler",
			"metadata": {"author": "docs-team", "version": 2},
			"allowed-tools": "Read Bash(pdftotext:*)",
		})
		meta = SkillLoader([root]).discover()["pdf-tools"]
		assert meta.license == "MIT"
		assert meta.compatibility == "Requires poppler"
		assert meta.metadata == {"author": "docs-team", "version": "2"}
		assert meta.allowed_tools == ("Read", "Bash(pdftotext:*)")

	def test_malformed_metadata_skipped_with_warning(self, tmp_path: Path, caplog):
		"""Malformed skills should be skipped with a warning, not raise."""
		root = tmp_path / "skills"
		write_skill(root, "good-skill", "Does good things")
		write_skill(root, "Bad_Name", "Uppercase name")
		write_skill(root, "other-name", "Name does not match folder", folder="mismatch")
		write_skill(root, "no-description", "")
		(root / "no-frontmatter").mkdir()
		(root / "no-frontmatter" / "SKILL.md").write_text("# Just a title\n")
		(root / "bad-yaml").mkdir()
		(root / "bad-yaml" / "SKILL.md").write_text("---\nname: [oops\n---\nbody\n")

		with caplog.at_level(logging.WARNING, logger="skill_resolver"):
			found = SkillLoader([root]).discover()

		assert list(found) == ["good-skill"]
		skipped = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
		assert len(skipped) == 5
		assert any("does not match folder" in msg for msg in skipped)
		assert any("No frontmatter" in msg for msg in skipped)

	def test_folder_without_skill_file_ignored(self, tmp_path: Path, caplog):
		"""Folders without SKILL.md should be ignored."""
		root = tmp_path / "skills"
		(root / "scratch").mkdir(parents=True)
		(root / ".hidden").mkdir()
		(root / "README.md").write_text("not a skill")
		with caplog.at_level(logging.WARNING, logger="skill_resolver"):
			assert SkillLoader([root]).discover() == {}
		assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

	def test_missing_root_is_ignored(self, tmp_path: Path):
		"""A root that does not exist should yield no skills."""
		assert SkillLoader([tmp_path / "nope"]).discover() == {}

	def test_later_root_overrides(self, tmp_path: Path):
		"""Project skills should override user skills of the same name."""
		user = tmp_path / "user"
		project = tmp_path / "project"
		write_skill(user, "code-review", "User version")
		write_skill(project, "code-review", "Project version")
		found = SkillLoader([user, project]).discover()
		assert found["code-review"].description == "Project version"

	def test_discover_is_cached_until_reload(self, tmp_path: Path):
		"""discover should cache until reload=True."""
		root = tmp_path / "skills"
		write_skill(root, "first", "First skill")
		loader = SkillLoader([root])
		assert list(loader.discover()) == ["first"]

		write_skill(root, "second", "Second skill")
		assert list(loader.discover()) == ["first"]
		assert sorted(loader.discover(reload=True)) == ["first", "second"]

	def test_list_skills_sorted(self, skills_root: Path):
		"""list_skills should be sorted by name."""
		names = [s["name"] for s in SkillLoader([skills_root]).list_skills()]
		assert names == sorted(SKILLS)


class TestLoadSkill:
	def test_load_skill_reads_body_and_references(self, tmp_path: Path):
		"""Activation should read the body and the resources it references."""
		root = tmp_path / "skills"
		body = (
			"# PDF\n\nRun `scripts/extract.py` first.\n"
			"See [the guide](references/guide.md) and [docs](https://example.com).\n"
		)
		write_skill(root, "pdf-tools", "Work with PDF files", body=body)
		skill = SkillLoader([root]).load_skill("pdf-tools")
		assert skill.name == "pdf-tools"
		assert skill.instructions.startswith("# PDF")
		assert skill.resources == ("references/guide.md", "scripts/extract.py")

	def test_unknown_skill(self, skills_root: Path):
		"""Unknown skills should raise SkillNotFoundError."""
		with pytest.raises(SkillNotFoundError):
			SkillLoader([skills_root]).load_skill("missing")

	def test_skill_file_broken_after_discovery(self, skills_root: Path):
		"""A SKILL.md broken after discovery should raise SkillLoadError."""
		loader = SkillLoader([skills_root])
		loader.discover()
		(skills_root / "code-review" / "SKILL.md").write_text("no frontmatter any more")
		with pytest.raises(SkillLoadError):
			loader.load_skill("code-review")


class TestLoadResource:
	@pytest.fixture
	def loader(self, tmp_path: Path) -> SkillLoader:
		root = tmp_path / "skills"
		skill_dir = write_skill(root, "pdf-tools", "Work with PDF files", body="Use scripts/extract.py")
		(skill_dir / "scripts").mkdir()
		(skill_dir / "scripts" / "extract.py").write_text("print('extract')\n")
		(skill_dir / "assets").mkdir()
		(skill_dir / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
		(tmp_path / "secret.txt").write_text("outside")
		return SkillLoader([root])

	def test_text_resource(self, loader: SkillLoader):
		"""Text resources should load as decoded content."""
		skill = loader.load_skill("pdf-tools")
		resource = loader.load_resource(skill, "scripts/extract.py")
		assert resource.kind == ResourceKind.SCRIPT
		assert resource.content == "print('extract')\n"
		assert not resource.is_binary

	def test_binary_resource(self, loader: SkillLoader):
		"""Binary resources should load as bytes with no text content."""
		skill = loader.load_skill("pdf-tools")
		resource = loader.load_resource(skill, "assets/logo.png")
		assert resource.kind == ResourceKind.ASSET
		assert resource.is_binary
		assert resource.data.startswith(b"\x89PNG")

	def test_missing_resource(self, loader: SkillLoader):
		"""A missing resource should raise ResourceNotFoundError."""
		skill = loader.load_skill("pdf-tools")
		with pytest.raises(ResourceNotFoundError):
			loader.load_resource(skill, "references/missing.md")

	def test_path_escape_rejected(self, loader: SkillLoader):
		"""Paths leaving the skill folder should raise ResourceAccessError."""
		skill = loader.load_skill("pdf-tools")
		with pytest.raises(ResourceAccessError):
			loader.load_resource(skill, "../../secret.txt")

	def test_load_resources_and_listing(self, loader: SkillLoader):
		"""load_resources should load every referenced file."""
		skill = loader.load_skill("pdf-tools")
		resources = loader.load_resources(skill)
		assert [r.relative_path for r in resources] == ["scripts/extract.py"]
		assert loader.list_resource_files(skill) == ["scripts/extract.py", "assets/logo.png"]


class TestCreateTemplate:
	def test_creates_parseable_skill(self, tmp_path: Path):
		"""The generated template should be discoverable."""
		root = tmp_path / "skills"
		loader = SkillLoader([root])
		skill_file = loader.create_skill_template("release-notes")
		assert skill_file == root / "release-notes" / "SKILL.md"
		assert "release-notes" in loader.discover()

	def test_rejects_invalid_name(self, tmp_path: Path):
		"""Names breaking the naming rules should be rejected."""
		with pytest.raises(ValueError):
			SkillLoader([tmp_path]).create_skill_template("Release Notes")

	def test_refuses_to_overwrite(self, skills_root: Path):
		"""An existing skill should never be overwritten."""
		with pytest.raises(FileExistsError):
			SkillLoader([skills_root]).create_skill_template("code-review")


def test_find_resource_references_ignores_urls_and_parents():
	"""URLs, anchors and parent paths should not count as resources."""
	text = (
		"[a](./references/a.md) [b](references/a.md#intro) [c](https://x.io/y) "
		"[d](../outside.md) [e](#anchor) [f](/abs/path.md) [g](SKILL.md) "
		"and assets/template.docx."
	)
	assert find_resource_references(text) == ["references/a.md", "assets/template.docx"]
