"""Skills module - Skill discovery, matching and loading."""

from .loader import SkillLoader, find_resource_references
from .matcher import MatchScore, SkillMatcher, extract_directive, tokenize
from .models import ResourceKind, Skill, SkillMetadata, SkillResource
from .prompt import render_activation, render_catalog
from .resolver import Resolution, SkillResolver

__all__ = [
	"SkillLoader",
	"find_resource_references",
	"SkillMatcher",
	"MatchScore",
	"extract_directive",
	"tokenize",
	"Skill",
	"SkillMetadata",
	"SkillResource",
	"ResourceKind",
	"render_catalog",
	"render_activation",
	"SkillResolver",
	"Resolution",
]
