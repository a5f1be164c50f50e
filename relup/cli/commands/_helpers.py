"""Shared helpers for the phase commands."""

from __future__ import annotations

from collections.abc import Callable
from typing import NoReturn

import typer

from relup.action.outputs import ActionOutputs
from relup.core.errors import ErrorCode
from relup.core.result import Err, Result
from relup.output.console import Style
from relup.reconcile.errors import ReconcileError, unknown_error


def guarded[T](run: Callable[[], Result[T, ReconcileError]]) -> Result[T, ReconcileError]:
    """Run a phase, turning any unexpected exception into an ``unknown`` error."""
    try:
        return run()
    except Exception as e:  # noqa: BLE001
        return Err(unknown_error(e))


def exit_code_for(error: ReconcileError) -> ErrorCode:
    match error.kind:
        case "configuration" if error.stage == "environment":
            return ErrorCode.ENV_ERROR
        case "configuration":
            return ErrorCode.USER_ERROR
        case "remote_operation":
            return ErrorCode.NETWORK_ERROR
        case "unknown":
            return ErrorCode.INTERNAL_ERROR
    # Fallback for exhaustiveness
    return ErrorCode.INTERNAL_ERROR


def fail(error: ReconcileError, outputs: ActionOutputs) -> NoReturn:
    """Report the failure to the runner and exit without setting outputs."""
    if error.kind == "remote_operation" and error.hint:
        # The API cause belongs in the annotation itself.
        outputs.set_failed(f"{error.message}: {error.hint}")
    else:
        outputs.set_failed(error.message)
        if error.hint:
            outputs.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(exit_code_for(error)))
