"""Header policy — rules, the pipeline that applies them, and builders.

Learn: Three layers, bottom-up:
1. rules.py     — HeaderRule value objects (one header mutation each)
2. pipeline.py  — apply() and the immutable PolicyConfig
3. builders.py  — settings sections → rules, in a fixed order
"""

from headerguard.policy.builders import build_policy
from headerguard.policy.pipeline import PolicyConfig, UpstreamHeaderControl, apply
from headerguard.policy.rules import HeaderRule, RuleAction

__all__ = [
    "HeaderRule",
    "PolicyConfig",
    "RuleAction",
    "UpstreamHeaderControl",
    "apply",
    "build_policy",
]
