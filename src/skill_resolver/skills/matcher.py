"""
Keyword-overlap matching between a request and skill descriptions.

Selection signals:
1) Explicit directive: "/skill <name>" or "@skill <name>"
2) Distinguishing keywords from each skill's name and description
"""

import re
from dataclasses import dataclass, field
from typing import Iterable

from .models import SkillMetadata

WORD_RE = re.compile(r"[a-z0-9]+")
DIRECTIVE_RE = re.compile(r"(?:^|\s)(?:@skill|/skill)\s+([a-z0-9][a-z0-9-]*)\b", re.IGNORECASE)

NAME_BONUS = 0.25

STOP_WORDS = frozenset("""
a about above after again all also an and any are as at be because been before being
below between both but by can could did do does doing down during each either else
etc every few for from further get gets given had has have having he her here hers
him his how i if in into is it its itself just let like ll make may me might more
most must my need needs no nor not now of off on once one only or other our ours out
over own please re same she should so some such than that the their theirs them
then there these they this those through to too under until up upon us use used
uses using ve very via want was we were what when where which while who whom why
will with within without would yes yet you your yours
""".split())


def _fold(word: str) -> str:
	"""Fold common English suffixes so 'reviews', 'reviewing' and 'review' compare equal."""
	if len(word) > 4 and word.endswith("ies"):
		return word[:-3] + "y"
	if len(word) > 3 and word.endswith("s") and not word.endswith("ss"):
		word = word[:-1]
	for suffix in ("ing", "ed"):
		if word.endswith(suffix) and len(word) - len(suffix) >= 3:
			return word[:-len(suffix)]
	return word


def tokenize(text: str) -> set[str]:
	"""Lowercase content words of text, stop words removed and suffixes folded."""
	return {
		_fold(w)
		for w in WORD_RE.findall(text.lower())
		if len(w) > 1 and w not in STOP_WORDS
	}


def extract_directive(request: str) -> tuple[str | None, str]:
	"""
	Pull an explicit "/skill <name>" directive out of a request.

	Returns:
		(skill_name or None, request with the directive removed)
	"""
	text = str(request or "")
	m = DIRECTIVE_RE.search(text)
	if not m:
		return None, text
	cleaned = (text[: m.start()] + " " + text[m.end():]).strip()
	return m.group(1).lower(), cleaned


@dataclass(frozen=True)
class MatchScore:
	"""Relevance of one skill to one request."""
	name: str
	score: float
	hits: tuple[str, ...] = field(default_factory=tuple)
	name_match: bool = False


class SkillMatcher:
	"""
	Score requests against a fixed set of skill descriptions.

	A skill's keywords are the content words of its name and description.
	Only distinguishing keywords count towards a match: those found in at
	most half of the skills (every keyword when there is a single skill).
	Each hit weighs 1 / (number of skills sharing the keyword), so a keyword
	unique to one skill is worth a full hit. With E the summed weight of the
	hits, the score is E / (E + 1), which does not depend on how long the
	request is. Naming every part of the hyphenated skill name adds a bonus.
	"""

	def __init__(self, skills: Iterable[SkillMetadata]):
		self._name_parts: dict[str, set[str]] = {}
		keywords: dict[str, set[str]] = {}
		for meta in skills:
			parts = tokenize(meta.name.replace("-", " "))
			self._name_parts[meta.name] = parts
			keywords[meta.name] = parts | tokenize(meta.description)

		doc_freq: dict[str, int] = {}
		for words in keywords.values():
			for w in words:
				doc_freq[w] = doc_freq.get(w, 0) + 1

		total = len(keywords)
		self._weights = {w: 1.0 / n for w, n in doc_freq.items()}
		self._distinguishing: dict[str, set[str]] = {
			name: {w for w in words if total == 1 or doc_freq[w] <= total / 2}
			for name, words in keywords.items()
		}

	@property
	def skill_names(self) -> list[str]:
		return sorted(self._distinguishing)

	def distinguishing_keywords(self, name: str) -> set[str]:
		return set(self._distinguishing.get(name, set()))

	def score(self, request: str) -> list[MatchScore]:
		"""
		Score every skill against a request.

		Returns:
			MatchScore per skill, best first (ties broken by name)
		"""
		words = tokenize(request)
		results = []
		for name, keywords in self._distinguishing.items():
			hits = words & keywords
			evidence = sum(self._weights[w] for w in hits)
			value = evidence / (evidence + 1.0)
			parts = self._name_parts[name]
			name_match = bool(parts) and parts <= words
			if name_match:
				value += NAME_BONUS
			results.append(MatchScore(
				name=name,
				score=round(min(value, 1.0), 4),
				hits=tuple(sorted(hits)),
				name_match=name_match,
			))

		results.sort(key=lambda m: (-m.score, m.name))
		return results
