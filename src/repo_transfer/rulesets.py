"""Decide whether an organization ruleset applies to a repository.

Rulesets target repositories by name. An entry containing ``*`` anywhere is
treated as "every repository"; it is not a glob. Exclusion wins over
inclusion.
"""

from __future__ import annotations

from collections.abc import Iterable

from repo_transfer.models.policy import Policy, RulesetConditions

TARGETS_PREFIX = "Targets repos: "
EXCLUDES_PREFIX = "Excludes repos: "
ALL_REPOSITORIES = "All repositories"
PROTECTED_NOTE = "Applies to protected repositories"


def _matches(entries: Iterable[str], repository: str) -> bool:
    return any(entry == repository or "*" in entry for entry in entries)


def applies(conditions: RulesetConditions, repository: str) -> bool:
    """True if a ruleset with ``conditions`` binds ``repository`` (the bare name)."""
    if conditions.include and not _matches(conditions.include, repository):
        return False
    return not _matches(conditions.exclude, repository)


def describe_conditions(conditions: RulesetConditions) -> list[str]:
    """Human-readable targeting lines, as shown on discovered org rulesets."""
    lines: list[str] = []
    if conditions.include:
        lines.append(TARGETS_PREFIX + ", ".join(conditions.include))
    elif not conditions.exclude and not conditions.protected:
        lines.append(TARGETS_PREFIX + ALL_REPOSITORIES)
    if conditions.exclude:
        lines.append(EXCLUDES_PREFIX + ", ".join(conditions.exclude))
    if conditions.protected:
        lines.append(PROTECTED_NOTE)
    return lines


def _split_names(text: str) -> tuple[str, ...]:
    return tuple(name.strip() for name in text.split(",") if name.strip())


def conditions_from_restrictions(restrictions: Iterable[str]) -> RulesetConditions:
    """Rebuild conditions from the lines written by :func:`describe_conditions`.

    Used only for policies that were recorded without structured conditions.
    """
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    protected = False
    for line in restrictions:
        if line.startswith(TARGETS_PREFIX):
            value = line[len(TARGETS_PREFIX):].strip()
            if value != ALL_REPOSITORIES:
                include += _split_names(value)
        elif line.startswith(EXCLUDES_PREFIX):
            exclude += _split_names(line[len(EXCLUDES_PREFIX):])
        elif line == PROTECTED_NOTE:
            protected = True
    return RulesetConditions(include=include, exclude=exclude, protected=protected)


def policy_applies(policy: Policy, repository: str) -> bool:
    conditions = policy.conditions
    if conditions is None:
        conditions = conditions_from_restrictions(policy.restrictions)
    return applies(conditions, repository)
