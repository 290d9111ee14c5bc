"""Tests for the skill resolver."""

from pathlib import Path

import pytest

from skill_resolver.config import Config
from skill_resolver.skills import SkillLoader, SkillResolver, render_activation, render_catalog
from tests.conftest import SKILLS
from tests.helpers import write_skill


@pytest.fixture
def resolver(skills_root: Path) -> SkillResolver:
	resolver = SkillResolver(SkillLoader([skills_root]))
	resolver.initialize()
	return resolver


def test_review_request_selects_code_review(resolver: SkillResolver):
	"""A pull-request review request should select code-review alone."""
	resolution = resolver.resolve("review this pull request for security issues")
	assert resolution.selected
	assert resolution.skill_name == "code-review"
	assert resolution.skill.instructions.startswith("# code-review")
	assert [c.name for c in resolution.candidates] == ["code-review"]
	assert not resolution.ambiguous


def test_unrelated_request_selects_nothing(resolver: SkillResolver):
	"""A request matching no description should select no skill."""
	resolution = resolver.resolve("draft a changelog in French")
	assert not resolution.selected
	assert resolution.skill is None
	assert resolution.reason == "no skill matched"
	assert resolution.error is None


@pytest.mark.parametrize("template", [
	"help with {}",
	"could you give me a detailed and thorough explanation of {} for the team wiki page",
])
@pytest.mark.parametrize("name,keyword", [
	("code-review", "diff"),
	("spring-boot-service", "jpa"),
	("kotlin-style", "coroutines"),
	("typescript-react", "hooks"),
])
def test_distinguishing_keyword_is_sole_match(resolver: SkillResolver, template: str, name: str, keyword: str):
	"""A keyword unique to one skill should select it however long the request."""
	resolution = resolver.resolve(template.format(keyword))
	assert resolution.skill_name == name
	assert [c.name for c in resolution.candidates] == [name]


def test_explicit_directive(resolver: SkillResolver):
	"""/skill <name> should bypass scoring."""
	resolution = resolver.resolve("/skill kotlin-style draft a changelog")
	assert resolution.skill_name == "kotlin-style"
	assert resolution.reason == "explicit directive"
	assert resolution.score == 1.0


def test_unknown_directive_falls_back_to_matching(resolver: SkillResolver):
	"""An unknown directive name should fall back to scoring the rest of the request."""
	resolution = resolver.resolve("/skill nope review the diff")
	assert resolution.skill_name == "code-review"


def test_multiple_matches_pick_highest_and_flag_ambiguity(tmp_path: Path):
	"""Close candidates should still pick one skill but flag the result ambiguous."""
	root = tmp_path / "skills"
	for name, description in SKILLS.items():
		write_skill(root, name, description)
	write_skill(root, "sql-migrations", "Write database schema migrations")
	write_skill(root, "sql-queries", "Optimize database queries")
	resolver = SkillResolver(SkillLoader([root]))

	resolution = resolver.resolve("database work")
	assert resolution.skill_name == "sql-migrations"
	assert resolution.ambiguous
	assert [c.name for c in resolution.candidates] == ["sql-migrations", "sql-queries"]

	resolution = resolver.resolve("optimize database queries")
	assert resolution.skill_name == "sql-queries"
	assert not resolution.ambiguous


def test_word_shared_by_every_skill_selects_nothing(tmp_path: Path):
	"""With two skills, a word both descriptions use should not select either."""
	root = tmp_path / "skills"
	write_skill(root, "java-format", "Format Java code")
	write_skill(root, "java-lint", "Lint Java code")
	resolver = SkillResolver(SkillLoader([root]))

	assert not resolver.resolve("java").selected
	resolution = resolver.resolve("lint this java file")
	assert resolution.skill_name == "java-lint"
	assert not resolution.ambiguous


def test_threshold_filters_weak_matches(resolver: SkillResolver):
	"""Matches below relevance_threshold should not be selected."""
	resolver.relevance_threshold = 0.9
	resolution = resolver.resolve("review the kotlin diff for naming problems")
	assert not resolution.selected


def test_missing_resource_fails_only_that_load(tmp_path: Path):
	"""A missing resource should fail that resolution and leave the resolver usable."""
	root = tmp_path / "skills"
	write_skill(root, "pdf-tools", "Extract text from PDF files", body="Run scripts/extract.py")
	write_skill(root, "code-review", SKILLS["code-review"])
	resolver = SkillResolver(SkillLoader([root]))

	resolution = resolver.resolve("extract pdf text", load_resources=True)
	assert not resolution.selected
	assert "scripts/extract.py" in resolution.error

	# Without resources the same skill still activates
	assert resolver.resolve("extract pdf text").skill_name == "pdf-tools"
	# and other skills are unaffected
	assert resolver.resolve("review the diff", load_resources=True).skill_name == "code-review"


def test_resources_loaded_on_request(tmp_path: Path):
	"""load_resources=True should attach referenced files to the activation prompt."""
	root = tmp_path / "skills"
	skill_dir = write_skill(root, "pdf-tools", "Extract text from PDF files", body="See references/guide.md")
	(skill_dir / "references").mkdir()
	(skill_dir / "references" / "guide.md").write_text("# Guide\n")
	resolver = SkillResolver(SkillLoader([root]))

	resolution = resolver.resolve("extract pdf text", load_resources=True)
	assert [r.relative_path for r in resolution.resources] == ["references/guide.md"]
	assert resolution.to_dict()["resources"] == ["references/guide.md"]

	prompt = render_activation(resolution.skill, resolution.resources, request="extract pdf text")
	assert "# Skill: pdf-tools" in prompt
	assert "### references/guide.md" in prompt
	assert prompt.endswith("## Request\nextract pdf text")


def test_from_config_uses_roots_and_thresholds(tmp_path: Path, skills_root: Path):
	"""from_config should take skill roots and thresholds from Config."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		claude_home=tmp_path,
		project_path=tmp_path / "project",
		relevance_threshold=0.5,
	)
	resolver = SkillResolver.from_config(config)
	assert resolver.loader.roots == [skills_root, tmp_path / "project" / ".claude" / "skills"]
	assert resolver.relevance_threshold == 0.5
	assert resolver.resolve("review this pull request").skill_name == "code-review"


def test_render_catalog(skills_root: Path):
	"""The catalog should list every skill's metadata and no instruction body."""
	catalog = render_catalog(SkillLoader([skills_root]).discover().values())
	assert catalog.startswith("<available_skills>")
	assert catalog.count("<skill>") == len(SKILLS)
	assert "<name>code-review</name>" in catalog
	assert "checklist" not in catalog
