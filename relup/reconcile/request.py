"""Reconcile request and input parsing.

Raw inputs arrive as strings (action inputs or CLI options). An empty
string means the input was not provided; parsing turns it into ``None`` so
the rest of the code only ever sees "absent" or a real value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from relup.core.result import Err, Ok, Result
from relup.reconcile.errors import ReconcileError, configuration_error

__all__ = [
    "ReconcileRequest",
    "ReconcileResult",
    "optional_input",
    "parse_release_id",
    "parse_draft_status",
    "parse_bool_input",
]

# Same grammar as the Actions toolkit's boolean inputs (YAML 1.2 core schema).
_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


@dataclass(frozen=True, slots=True)
class ReconcileRequest:
    release_id: int
    new_name: str | None = None
    new_body: str | None = None
    new_tag: str | None = None
    commitish: str | None = None
    delete_assets: bool = False
    delete_tags_prefix: str | None = None
    new_draft_status: bool | None = None

    def as_log_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    id: int
    html_url: str | None
    upload_url: str | None


def optional_input(value: str | None) -> str | None:
    """Map a raw input to None when it was not provided."""
    if value is None or value == "":
        return None
    return value


def parse_release_id(value: str | None) -> Result[int, ReconcileError]:
    raw = (value or "").strip()
    if not raw:
        return Err(configuration_error("Input required and not supplied: id"))
    try:
        release_id = int(raw)
    except ValueError:
        return Err(configuration_error(f"id must be an integer, got '{raw}'"))
    if release_id <= 0:
        return Err(configuration_error(f"id must be positive, got {release_id}"))
    return Ok(release_id)


def parse_draft_status(value: str | None) -> Result[bool | None, ReconcileError]:
    """Parse ``new_draft_status``: absent, or exactly 'true' / 'false'."""
    raw = (value or "").strip()
    if not raw:
        return Ok(None)
    if raw not in ("true", "false"):
        return Err(
            configuration_error(
                "new_draft_status must be either 'true' or 'false'",
                hint=f"got '{raw}'",
            )
        )
    return Ok(raw == "true")


def parse_bool_input(name: str, value: str | None, *, default: bool = False) -> Result[bool, ReconcileError]:
    raw = (value or "").strip()
    if not raw:
        return Ok(default)
    if raw in _TRUE_VALUES:
        return Ok(True)
    if raw in _FALSE_VALUES:
        return Ok(False)
    return Err(
        configuration_error(
            f"{name} must be a boolean",
            hint="Support boolean input list: `true | True | TRUE | false | False | FALSE`",
        )
    )
