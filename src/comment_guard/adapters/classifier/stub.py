"""Stub classifier using keyword rules."""

import re

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.domain.enums import CommentClassification
from comment_guard.domain.models import ClassificationResult

GAMBLING_KEYWORDS = (
    "judi",
    "slot",
    "gacor",
    "maxwin",
    "togel",
    "toto",
    "deposit",
    "jackpot",
    "casino",
    "betting",
)

_KEYWORD_RE = re.compile(r"\b(" + "|".join(GAMBLING_KEYWORDS) + r")\b", re.IGNORECASE)


class StubClassifierProvider(ClassifierProvider):
    """Flags comments that mention gambling keywords."""

    model_version = "stub-keywords-1"

    @property
    def name(self) -> str:
        return "stub"

    async def classify(self, text: str) -> ClassificationResult:
        hits = len(_KEYWORD_RE.findall(text or ""))
        if hits:
            return ClassificationResult(
                label=CommentClassification.JUDI.value,
                confidence_score=min(0.6 + 0.1 * hits, 0.99),
                model_version=self.model_version,
            )
        return ClassificationResult(
            label=CommentClassification.NON_JUDI.value,
            confidence_score=0.9,
            model_version=self.model_version,
        )
