"""Policy report endpoint.

Learn: Shows the rule table the process started with, including
disabled rules and the CSP directives left unrestricted, so operators
can check a deployment without reading env vars.
"""

from fastapi import APIRouter, Request

from headerguard.schemas.policy import PolicyRead, RuleRead

router = APIRouter()


@router.get("/policy", response_model=PolicyRead)
async def get_policy(request: Request):
    """Return the active header policy."""
    policy = request.app.state.policy
    platform = request.app.state.platform
    return PolicyRead(
        rules=[RuleRead(**rule.describe()) for rule in policy],
        headers=policy.header_names(),
        csp_gaps=list(policy.csp_gaps),
        relinquished_upstream=platform.relinquished,
    )
