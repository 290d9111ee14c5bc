"""
Skill Resolver - choose the skill for a request and load it.

Resolution is a single pass:
1. Explicit "/skill <name>" directive, if it names a known skill
2. Otherwise score every skill's description against the request
3. Load the best candidate that clears the relevance threshold

Two outcomes only: a skill is loaded, or no skill is loaded.
"""

import logging
from dataclasses import dataclass, field

from ..config import Config
from ..errors import ResourceAccessError, ResourceNotFoundError, SkillLoadError, SkillNotFoundError
from .loader import SkillLoader
from .matcher import MatchScore, SkillMatcher, extract_directive
from .models import Skill, SkillResource

logger = logging.getLogger(__name__)

DEFAULT_RELEVANCE_THRESHOLD = 0.2
DEFAULT_AMBIGUITY_MARGIN = 0.05
DEFAULT_MIN_KEYWORD_HITS = 1


@dataclass(frozen=True)
class Resolution:
	"""Outcome of resolving one request."""
	request: str
	skill: Skill | None = None
	score: float = 0.0
	reason: str = ""
	candidates: tuple[MatchScore, ...] = ()
	ambiguous: bool = False
	resources: tuple[SkillResource, ...] = ()
	error: str | None = None

	@property
	def selected(self) -> bool:
		return self.skill is not None

	@property
	def skill_name(self) -> str | None:
		return self.skill.name if self.skill else None

	def to_dict(self) -> dict:
		return {
			"request": self.request,
			"selected": self.selected,
			"skill": self.skill_name,
			"score": self.score,
			"reason": self.reason,
			"ambiguous": self.ambiguous,
			"candidates": [{"name": c.name, "score": c.score, "hits": list(c.hits)} for c in self.candidates],
			"resources": [r.relative_path for r in self.resources],
			"error": self.error,
		}


class SkillResolver:
	"""
	Resolves requests to skills.

	Usage:
		resolver = SkillResolver(SkillLoader([Path("~/.claude/skills")]))
		resolver.initialize()

		resolution = resolver.resolve("review this pull request")
		if resolution.selected:
			print(resolution.skill.instructions)
	"""

	def __init__(
		self,
		loader: SkillLoader,
		relevance_threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
		ambiguity_margin: float = DEFAULT_AMBIGUITY_MARGIN,
		min_keyword_hits: int = DEFAULT_MIN_KEYWORD_HITS,
	):
		self.loader = loader
		self.relevance_threshold = relevance_threshold
		self.ambiguity_margin = ambiguity_margin
		self.min_keyword_hits = min_keyword_hits
		self._matcher: SkillMatcher | None = None

	@classmethod
	def from_config(cls, config: Config) -> "SkillResolver":
		return cls(
			SkillLoader(config.skill_roots),
			relevance_threshold=config.relevance_threshold,
			ambiguity_margin=config.ambiguity_margin,
			min_keyword_hits=config.min_keyword_hits,
		)

	def initialize(self, reload: bool = False) -> None:
		"""Load skill metadata and build the matcher."""
		metadata = self.loader.discover(reload=reload)
		self._matcher = SkillMatcher(metadata.values())

	@property
	def matcher(self) -> SkillMatcher:
		if self._matcher is None:
			self.initialize()
		return self._matcher

	def rank(self, request: str) -> list[MatchScore]:
		"""Skills clearing the relevance threshold, best first."""
		return [
			m for m in self.matcher.score(request)
			if m.score >= self.relevance_threshold
			and (len(m.hits) >= self.min_keyword_hits or m.name_match)
		]

	def resolve(self, request: str, load_resources: bool = False) -> Resolution:
		"""
		Resolve a request to at most one skill.

		Args:
			request: User request text
			load_resources: Also load every resource the skill references

		Returns:
			Resolution; a missing resource or unreadable skill fails this
			request only and is reported in Resolution.error
		"""
		matcher = self.matcher
		requested, cleaned = extract_directive(request)

		if requested and requested in matcher.skill_names:
			logger.debug(f"Explicit skill directive: {requested}")
			best = MatchScore(name=requested, score=1.0, name_match=True)
			return self._activate(request, best, (best,), False, "explicit directive", load_resources)
		if requested:
			logger.warning(f"Directive names unknown skill: {requested}")

		candidates = tuple(self.rank(cleaned))
		if not candidates:
			return Resolution(request=request, reason="no skill matched")

		best = candidates[0]
		ambiguous = len(candidates) > 1 and (best.score - candidates[1].score) <= self.ambiguity_margin
		if ambiguous:
			logger.info(
				f"Ambiguous match for request; picking '{best.name}' over '{candidates[1].name}'"
			)
		reason = f"keyword hits: {', '.join(best.hits)}" if best.hits else "skill name in request"
		return self._activate(request, best, candidates, ambiguous, reason, load_resources)

	def _activate(
		self,
		request: str,
		best: MatchScore,
		candidates: tuple[MatchScore, ...],
		ambiguous: bool,
		reason: str,
		load_resources: bool,
	) -> Resolution:
		try:
			skill = self.loader.load_skill(best.name)
			resources = tuple(self.loader.load_resources(skill)) if load_resources else ()
		except (SkillNotFoundError, SkillLoadError, ResourceNotFoundError, ResourceAccessError) as e:
			logger.warning(f"Failed to activate skill '{best.name}': {e}")
			return Resolution(
				request=request,
				score=best.score,
				reason=reason,
				candidates=candidates,
				ambiguous=ambiguous,
				error=str(e),
			)

		logger.info(f"Selected skill '{skill.name}' (score {best.score:.2f})")
		return Resolution(
			request=request,
			skill=skill,
			score=best.score,
			reason=reason,
			candidates=candidates,
			ambiguous=ambiguous,
			resources=resources,
		)
