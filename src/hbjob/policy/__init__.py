"""Compliance policy: decides whether a source needs transcoding."""

from hbjob.policy.skip import (
    Concern,
    ConstraintCheck,
    ProfileSource,
    SkipEvaluationResult,
    evaluate_skip,
    should_skip,
)

__all__ = [
    "Concern",
    "ConstraintCheck",
    "ProfileSource",
    "SkipEvaluationResult",
    "evaluate_skip",
    "should_skip",
]
