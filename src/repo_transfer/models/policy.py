"""Organization policies and the repository conditions that scope them."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MEMBER_MANAGEMENT_POLICY = "Member Management Policy"

# Keywords that mark a policy as an org-wide member setting rather than a
# repository-level rule.
MEMBER_PRIVILEGE_KEYWORDS: tuple[str, ...] = (
    "member management",
    "repository creation",
    "private repository forking",
    "two-factor authentication",
    "web commit signoff",
)


class RulesetConditions(BaseModel):
    """Repository-name targeting of an org ruleset."""

    model_config = ConfigDict(frozen=True)

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    protected: bool = False


class Policy(BaseModel):
    """A named org policy: discovered on the source side or offered by the target.

    ``restrictions`` are human-readable lines. ``conditions`` is set for
    rulesets so targeting never has to be recovered from the prose.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    status: str = ""
    restrictions: tuple[str, ...] = ()
    conditions: RulesetConditions | None = None

    @property
    def label(self) -> str:
        return f"{self.name} (status: {self.status})"


def is_member_privilege_policy(policy: Policy) -> bool:
    """Heuristic split between member-privilege settings and repository policies."""
    name = policy.name.lower()
    # Anything explicitly named a policy is a repository policy, except the
    # synthesized member management one.
    if "policy" in name and policy.name != MEMBER_MANAGEMENT_POLICY:
        return False

    if any(keyword in name for keyword in MEMBER_PRIVILEGE_KEYWORDS):
        return True

    for restriction in policy.restrictions:
        lowered = restriction.lower()
        if any(keyword in lowered for keyword in MEMBER_PRIVILEGE_KEYWORDS):
            return True
    return False


# Policies implied by files in an organization's ``.github`` repository.
SECURITY_MD_POLICY = Policy(
    name="Organization Security Policy",
    status="active",
    restrictions=("SECURITY.md file present",),
)
DEPENDABOT_POLICY = Policy(
    name="Dependabot Configuration Policy",
    status="active",
    restrictions=("Automated dependency updates configured",),
)
