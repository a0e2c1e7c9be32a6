"""Bucket raw account type/group text into a :class:`MasterCategory`."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from account_mapper.core.name_normalize import normalize
from account_mapper.domain import MasterCategory

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
RULES_FILE = "classifier_rules.yaml"


@dataclass(frozen=True, slots=True)
class KeywordRule:
    category: MasterCategory
    keywords: tuple[str, ...]
    require_all: bool = False

    def matches(self, text: str) -> bool:
        if not self.keywords:
            return False
        hits = (_contains_word_prefix(text, keyword) for keyword in self.keywords)
        return all(hits) if self.require_all else any(hits)


def _contains_word_prefix(text: str, keyword: str) -> bool:
    return re.search(r"\b" + re.escape(keyword), text) is not None


def _load_rules() -> dict:
    path = CONFIG_DIR / RULES_FILE
    if not path.exists():
        logger.warning("classifier rules not found at %s; every account falls back to %s", path, MasterCategory.OTHER.value)
        return {"exact": {}, "keywords": []}
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp) or {}


class Classifier:
    """Ordered, first-match-wins classifier.

    ``OTHER`` as a whole word beats everything else, so "Other Operating
    Expense" never lands in Expense. Exact names come next, then the keyword
    families in file order. Anything left over is ``Other``.
    """

    def __init__(self, rules: Mapping[str, Any]) -> None:
        token = normalize(str(rules.get("other_token") or "OTHER"))
        self._other_pattern = re.compile(r"\b" + re.escape(token) + r"\b")
        self._exact: dict[str, MasterCategory] = {
            normalize(str(name)): MasterCategory.parse(str(category))
            for name, category in (rules.get("exact") or {}).items()
        }
        self._keyword_rules: list[KeywordRule] = []
        for entry in rules.get("keywords") or []:
            require_all = "all" in entry
            keywords = entry.get("all") if require_all else entry.get("any")
            self._keyword_rules.append(
                KeywordRule(
                    category=MasterCategory.parse(str(entry["category"])),
                    keywords=tuple(normalize(str(keyword)) for keyword in keywords or []),
                    require_all=require_all,
                )
            )

    def classify(self, raw_type: str | None, raw_group: str | None = "") -> MasterCategory:
        texts = [normalize(raw_type), normalize(raw_group)]

        if any(self._other_pattern.search(text) for text in texts):
            return MasterCategory.OTHER

        for text in texts:
            category = self._exact.get(text)
            if category is not None:
                return category

        for text in texts:
            if not text:
                continue
            for rule in self._keyword_rules:
                if rule.matches(text):
                    return rule.category

        return MasterCategory.OTHER


DEFAULT_CLASSIFIER = Classifier(_load_rules())


def classify(raw_type: str | None, raw_group: str | None = "") -> MasterCategory:
    """Classify with the packaged rule set."""

    return DEFAULT_CLASSIFIER.classify(raw_type, raw_group)
