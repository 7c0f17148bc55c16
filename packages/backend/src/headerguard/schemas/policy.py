"""Pydantic schemas for the policy report.

Learn: Read-only views of the PolicyConfig built at startup. Nothing
here can change the policy; there is no write endpoint.
"""

from typing import Optional

from pydantic import BaseModel


class RuleRead(BaseModel):
    name: str
    action: str
    value: Optional[str] = None
    enabled: bool
    source: str


class PolicyRead(BaseModel):
    rules: list[RuleRead]
    headers: list[str]
    csp_gaps: list[str] = []
    relinquished_upstream: list[str] = []
