"""Runner environment for a GitHub Actions step.

The token is checked first: without it nothing else matters, and no
request may be attempted.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relup.core.result import Err, Ok, Result
from relup.github.client import DEFAULT_API_URL
from relup.github.models import Repo, parse_repo
from relup.reconcile.errors import ReconcileError, environment_error

__all__ = ["ActionEnv", "load_action_env", "input_env_name"]

TOKEN_VAR = "GITHUB_TOKEN"
REPOSITORY_VAR = "GITHUB_REPOSITORY"
SHA_VAR = "GITHUB_SHA"
API_URL_VAR = "GITHUB_API_URL"
OUTPUT_VAR = "GITHUB_OUTPUT"


@dataclass(frozen=True, slots=True)
class ActionEnv:
    token: str
    repo: Repo
    sha: str | None
    api_url: str = DEFAULT_API_URL
    output_path: Path | None = None


def input_env_name(name: str) -> str:
    """Environment variable the runner uses for an action input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def load_action_env(
    environ: Mapping[str, str] | None = None,
    *,
    repository: str | None = None,
    sha: str | None = None,
) -> Result[ActionEnv, ReconcileError]:
    """Read the step environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        repository: ``owner/name`` overriding GITHUB_REPOSITORY
        sha: Commit overriding GITHUB_SHA

    Returns:
        Ok with ActionEnv, or Err with a configuration error
    """
    env = os.environ if environ is None else environ

    token = env.get(TOKEN_VAR, "").strip()
    if not token:
        return Err(environment_error(f"Environment variable '{TOKEN_VAR}' is not set"))

    raw_repo = (repository or env.get(REPOSITORY_VAR, "")).strip()
    if not raw_repo:
        return Err(
            environment_error(
                f"Environment variable '{REPOSITORY_VAR}' is not set",
                hint="Pass --repo owner/name when running outside Actions.",
            )
        )
    repo = parse_repo(raw_repo)
    if repo is None:
        return Err(environment_error(f"invalid repository '{raw_repo}' (expected owner/name)"))

    commit = (sha or env.get(SHA_VAR, "")).strip() or None
    api_url = env.get(API_URL_VAR, "").strip() or DEFAULT_API_URL
    output = env.get(OUTPUT_VAR, "").strip()

    return Ok(
        ActionEnv(
            token=token,
            repo=repo,
            sha=commit,
            api_url=api_url,
            output_path=Path(output) if output else None,
        )
    )
