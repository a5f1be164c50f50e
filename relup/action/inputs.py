from __future__ import annotations

from dataclasses import dataclass

from relup.core.result import Err, Ok, Result
from relup.reconcile.errors import ReconcileError
from relup.reconcile.request import (
    ReconcileRequest,
    optional_input,
    parse_bool_input,
    parse_draft_status,
    parse_release_id,
)

__all__ = ["RawInputs", "build_request"]


@dataclass(frozen=True, slots=True)
class RawInputs:
    """Inputs exactly as received; empty strings mean "not provided"."""

    id: str | None = None
    new_name: str | None = None
    new_body: str | None = None
    new_tag: str | None = None
    delete_assets: str | None = None
    delete_tags_prefix: str | None = None
    new_draft_status: str | None = None


def _input(value: str | None) -> str | None:
    # Inputs are trimmed the same way the runner toolkit trims them.
    return optional_input(value.strip() if value is not None else None)


def build_request(raw: RawInputs, *, commitish: str | None) -> Result[ReconcileRequest, ReconcileError]:
    """Validate raw inputs into a ReconcileRequest.

    Runs before any client exists, so a bad input never reaches the network.
    """
    release_id = parse_release_id(raw.id)
    if isinstance(release_id, Err):
        return release_id

    delete_assets = parse_bool_input("delete_assets", raw.delete_assets)
    if isinstance(delete_assets, Err):
        return delete_assets

    draft = parse_draft_status(raw.new_draft_status)
    if isinstance(draft, Err):
        return draft

    return Ok(
        ReconcileRequest(
            release_id=release_id.value,
            new_name=_input(raw.new_name),
            new_body=_input(raw.new_body),
            new_tag=_input(raw.new_tag),
            commitish=optional_input(commitish),
            delete_assets=delete_assets.value,
            delete_tags_prefix=_input(raw.delete_tags_prefix),
            new_draft_status=draft.value,
        )
    )
