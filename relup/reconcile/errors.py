from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relup.github.client import ApiError

type ReconcileErrorKind = Literal["configuration", "remote_operation", "unknown"]
type Stage = Literal[
    "environment",
    "inputs",
    "prune_assets",
    "prune_tags",
    "create_tag",
    "update_release",
]


@dataclass(frozen=True, slots=True)
class ReconcileError:
    kind: ReconcileErrorKind
    message: str
    stage: Stage | None = None
    hint: str | None = None


def configuration_error(message: str, *, hint: str | None = None) -> ReconcileError:
    return ReconcileError(kind="configuration", message=message, stage="inputs", hint=hint)


def remote_error(stage: Stage, message: str, error: ApiError) -> ReconcileError:
    return ReconcileError(kind="remote_operation", message=message, stage=stage, hint=str(error))


def unknown_error(exc: Exception) -> ReconcileError:
    detail = str(exc)
    name = type(exc).__name__
    return ReconcileError(
        kind="unknown",
        message=f"unknown error type {name}: {detail}" if detail else f"unknown error type {name}",
    )


def environment_error(message: str, *, hint: str | None = None) -> ReconcileError:
    return ReconcileError(kind="configuration", message=message, stage="environment", hint=hint)
