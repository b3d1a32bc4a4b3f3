"""Comment classifier providers."""

from comment_guard.adapters.classifier.base import ClassifierProvider
from comment_guard.adapters.classifier.http import HTTPClassifierProvider
from comment_guard.adapters.classifier.stub import StubClassifierProvider

__all__ = [
    "ClassifierProvider",
    "HTTPClassifierProvider",
    "StubClassifierProvider",
]
