from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)

BUILTIN_RULES_PATH = Path(__file__).with_name("highlight_rules.yaml")


@dataclass(frozen=True)
class HighlightRule:
    category: str
    pattern: re.Pattern


@dataclass(frozen=True)
class RuleSet:
    name: str
    rules: tuple[HighlightRule, ...]
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleSets:
    """All known languages plus the name of the fallback language."""

    languages: Mapping[str, RuleSet]
    default: str
    _lookup: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.default not in self.languages:
            raise ValueError(f"Default language '{self.default}' has no rule set.")
        lookup: dict[str, str] = {}
        for name, rule_set in self.languages.items():
            for alias in rule_set.aliases:
                lookup[alias] = name
        for name in self.languages:
            lookup[name] = name
        object.__setattr__(self, "_lookup", lookup)

    def for_language(self, language: str | None) -> RuleSet:
        """Return the rules for a language tag, falling back to the default set."""
        key = (language or "").strip().lower()
        name = self._lookup.get(key, self.default)
        return self.languages[name]


def parse_rule_sets(text: str, base: RuleSets | None = None) -> RuleSets:
    """Parse a YAML rule file into RuleSets.

    Languages in ``text`` replace same-named languages of ``base``. Raises
    ValueError when the structure or a pattern is invalid.
    """
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("Rule file root must be a mapping with a 'languages' key.")

    raw_languages = data.get("languages") or {}
    if not isinstance(raw_languages, dict):
        raise ValueError("'languages' must map language names to rule sets.")

    languages = dict(base.languages) if base else {}
    for name, entry in raw_languages.items():
        languages[str(name).lower()] = _build_rule_set(str(name).lower(), entry)

    default = data.get("default") or (base.default if base else None)
    if not default:
        raise ValueError("Rule file must name a 'default' language.")
    return RuleSets(languages=languages, default=str(default).lower())


def load_rule_sets(path: str | Path | None = None) -> RuleSets:
    """Load the built-in rules, optionally extended by a user rule file."""
    rule_sets = parse_rule_sets(BUILTIN_RULES_PATH.read_text(encoding="utf-8"))
    if path is not None:
        user_path = Path(path).expanduser()
        if not user_path.exists():
            raise FileNotFoundError(f"Rule file not found: {user_path}")
        rule_sets = parse_rule_sets(user_path.read_text(encoding="utf-8"), base=rule_sets)
        logger.debug("Loaded highlight rules from %s", user_path)
    return rule_sets


def _build_rule_set(name: str, entry) -> RuleSet:
    if entry is None:
        entry = {}
    if not isinstance(entry, dict):
        raise ValueError(f"Language '{name}' must be a mapping with 'rules'.")
    raw_rules = entry.get("rules") or []
    if not isinstance(raw_rules, list):
        raise ValueError(f"Language '{name}': 'rules' must be a list.")
    rules = tuple(_build_rule(name, idx, raw) for idx, raw in enumerate(raw_rules))
    aliases = tuple(str(alias).lower() for alias in _normalize_list(entry.get("aliases")))
    return RuleSet(name=name, rules=rules, aliases=aliases)


def _build_rule(language: str, index: int, raw) -> HighlightRule:
    if not isinstance(raw, dict):
        raise ValueError(f"Language '{language}', rule {index}: expected a mapping.")
    for key in ("category", "pattern"):
        if not raw.get(key):
            raise ValueError(f"Language '{language}', rule {index} is missing required field '{key}'")
    try:
        pattern = re.compile(str(raw["pattern"]))
    except re.error as e:
        raise ValueError(f"Language '{language}', rule {index}: invalid pattern: {e}") from e
    return HighlightRule(category=str(raw["category"]), pattern=pattern)


def _normalize_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]
