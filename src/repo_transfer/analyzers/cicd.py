"""GitHub Actions dependencies: org secrets and variables, runners, environments, required workflows."""

from __future__ import annotations

import asyncio
import logging
import posixpath

from repo_transfer.analyzers.base import CategoryAnalyzer, absent_as
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category, CIFacts
from repo_transfer.models.github import EnvironmentList, Ruleset, RunnerList, SecretList, VariableList
from repo_transfer.models.repository import RepositoryRef

logger = logging.getLogger(__name__)


class CICDAnalyzer(CategoryAnalyzer):
    category = Category.CI

    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> CIFacts:
        base = f"repos/{repository.full_name}"
        secrets, variables, runners, environments, workflows = await asyncio.gather(
            absent_as(client.get_as(f"{base}/actions/organization-secrets", SecretList), SecretList()),
            absent_as(client.get_as(f"{base}/actions/organization-variables", VariableList), VariableList()),
            absent_as(client.get_as(f"{base}/actions/runners", RunnerList), RunnerList()),
            absent_as(client.get_as(f"{base}/environments", EnvironmentList), EnvironmentList()),
            absent_as(self._required_workflows(client, repository), []),
        )
        return CIFacts(
            organization_secrets=[secret.name for secret in secrets.secrets],
            organization_variables=[variable.name for variable in variables.variables],
            self_hosted_runners=[runner.name for runner in runners.runners],
            environments=[f"Environment: {env.name}" for env in environments.environments],
            required_workflows=workflows,
        )

    async def _required_workflows(self, client: GitHubClient, repository: RepositoryRef) -> list[str]:
        base = f"repos/{repository.full_name}/rulesets"
        listed = await client.get_as(base, list[Ruleset])
        details = await asyncio.gather(
            *(absent_as(client.get_as(f"{base}/{ruleset.id}", Ruleset), None) for ruleset in listed)
        )

        workflows = []
        for ruleset, detail in zip(listed, details, strict=True):
            if detail is None:
                logger.debug("Ruleset %d of %s not readable", ruleset.id, repository.full_name)
                continue
            for rule in detail.rules:
                if rule.type != "workflows":
                    continue
                for workflow in rule.parameters.get("workflows") or []:
                    if not isinstance(workflow, dict):
                        continue
                    filename = posixpath.basename(str(workflow.get("path", "")))
                    workflows.append(
                        f"{filename} (ID: {workflow.get('repository_id', 0)}, "
                        f"repo: {ruleset.source}/{repository.name}, ruleset: {ruleset.name})"
                    )
        return workflows
