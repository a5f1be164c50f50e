from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from relup.action.env import ActionEnv
from relup.github.client import GitHubClient, HostingClient
from relup.output.console import ConsoleProtocol, RichConsole


def github_client(env: ActionEnv) -> HostingClient:
    return GitHubClient(env.token, api_url=env.api_url)


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol
    environ: Mapping[str, str]
    client_factory: Callable[[ActionEnv], HostingClient] = github_client


def build_context() -> CLIContext:
    return CLIContext(console=RichConsole(), environ=os.environ)
