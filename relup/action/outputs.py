"""Step outputs and failure reporting for GitHub Actions.

Outputs are appended to the file named by GITHUB_OUTPUT using the
delimiter form, which is safe for any value. Outside a runner they are
printed as ``name=value`` lines instead.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from relup.core.result import Err, Ok, Result
from relup.output.console import ConsoleProtocol
from relup.reconcile.errors import ReconcileError, environment_error
from relup.reconcile.request import ReconcileResult

__all__ = ["ActionOutputs", "escape_data", "format_output"]


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_output(name: str, value: str, *, delimiter: str) -> str:
    if delimiter in name or delimiter in value:
        raise ValueError(f"unexpected: output delimiter '{delimiter}' appears in the value")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def _output_value(value: object) -> str:
    # Unset values become empty strings, which is how the runner represents them.
    if value is None:
        return ""
    return str(value)


@dataclass
class ActionOutputs:
    console: ConsoleProtocol
    output_path: Path | None = None
    written: dict[str, str] = field(default_factory=lambda: dict[str, str]())

    def set_outputs(self, values: Mapping[str, object]) -> Result[None, ReconcileError]:
        """Set all outputs at once.

        The blocks are appended with a single write, so a failure leaves no
        output set.
        """
        texts = {name: _output_value(value) for name, value in values.items()}
        if self.output_path is None:
            for name, text in texts.items():
                self.console.print(f"{name}={text}")
        else:
            rendered = "".join(
                format_output(name, text, delimiter=f"ghadelimiter_{uuid.uuid4()}")
                for name, text in texts.items()
            )
            try:
                with self.output_path.open("a", encoding="utf-8") as f:
                    f.write(rendered)
            except OSError as e:
                return Err(
                    environment_error(
                        f"failed to write step outputs to '{self.output_path}'",
                        hint=str(e),
                    )
                )
        self.written.update(texts)
        return Ok(None)

    def publish(self, result: ReconcileResult) -> Result[None, ReconcileError]:
        return self.set_outputs(
            {"id": result.id, "html_url": result.html_url, "upload_url": result.upload_url}
        )

    def set_failed(self, message: str) -> None:
        """Emit an error annotation; the caller sets the exit code."""
        self.console.print(f"::error::{escape_data(message)}")
