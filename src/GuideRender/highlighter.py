"""Rule-ordered syntax highlighting.

Each source line starts as one unclaimed span. Rules run in order; a rule
only searches the spans no earlier rule has claimed, and every span it
matches becomes owned by that rule's category for good. Joining the
fragment texts of a line always gives the line back unchanged.
"""

from __future__ import annotations

from typing import Iterable, List

from .highlight_rules import HighlightRule, RuleSets, load_rule_sets
from .model import Fragment

_Span = tuple[int, int, "str | None"]


class Highlighter:
    def __init__(self, rule_sets: RuleSets | None = None) -> None:
        self.rule_sets = rule_sets or load_rule_sets()

    def highlight(self, code: str, language: str | None) -> List[List[Fragment]]:
        """Split ``code`` into lines and classify each line's fragments."""
        rules = self.rule_sets.for_language(language).rules
        return [highlight_line(line, rules) for line in code.split("\n")]


def highlight_line(line: str, rules: Iterable[HighlightRule]) -> List[Fragment]:
    spans: list[_Span] = [(0, len(line), None)] if line else []
    for rule in rules:
        if all(category is not None for _, _, category in spans):
            break
        spans = _claim(line, spans, rule)
    return [Fragment(line[start:end], category) for start, end, category in spans]


def _claim(line: str, spans: list[_Span], rule: HighlightRule) -> list[_Span]:
    """Let ``rule`` claim text in the still-unclaimed spans.

    A span keeps its category once claimed; later rules only see the gaps.
    Rebuilding the list per rule keeps spans ordered and contiguous.
    """
    result: list[_Span] = []
    for start, end, category in spans:
        if category is not None:
            result.append((start, end, category))
            continue
        pos = start
        for match in rule.pattern.finditer(line[start:end]):
            if match.start() == match.end():
                continue
            match_start, match_end = start + match.start(), start + match.end()
            if match_start > pos:
                result.append((pos, match_start, None))
            result.append((match_start, match_end, rule.category))
            pos = match_end
        if pos < end:
            result.append((pos, end, None))
    return result


# Singleton highlighter over the built-in rules
_highlighter: Highlighter | None = None


def get_highlighter() -> Highlighter:
    """Get or create the shared highlighter using the built-in rules."""
    global _highlighter
    if _highlighter is None:
        _highlighter = Highlighter()
    return _highlighter


def highlight(code: str, language: str | None = None) -> List[List[Fragment]]:
    return get_highlighter().highlight(code, language)
