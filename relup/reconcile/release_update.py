"""Field merge for the release update call.

A field that was not requested must be missing from the PATCH body, not sent
as null: GitHub clears a field set to null, which is never what an absent
input means.
"""

from __future__ import annotations

from dataclasses import dataclass

from relup.reconcile.request import ReconcileRequest

__all__ = ["ReleaseUpdate", "build_release_update"]


@dataclass(frozen=True, slots=True)
class ReleaseUpdate:
    tag_name: str | None = None
    name: str | None = None
    body: str | None = None
    target_commitish: str | None = None
    draft: bool | None = None

    @property
    def has_changes(self) -> bool:
        """True when the caller asked for a change to the release itself.

        ``target_commitish`` is always known in a pipeline run, so it only
        rides along with a real change and never triggers one on its own.
        """
        return (
            self.tag_name is not None
            or self.name is not None
            or self.body is not None
            or self.draft is not None
        )

    def payload(self) -> dict[str, object]:
        fields: dict[str, object] = {}
        if self.tag_name is not None:
            fields["tag_name"] = self.tag_name
        if self.name is not None:
            fields["name"] = self.name
        if self.body is not None:
            fields["body"] = self.body
        if self.target_commitish is not None:
            fields["target_commitish"] = self.target_commitish
        if self.draft is not None:
            fields["draft"] = self.draft
        return fields

    def describe(self) -> str:
        lines = [f"- {key}: {value}" for key, value in self.payload().items()]
        return "\n".join(lines)


def build_release_update(request: ReconcileRequest) -> ReleaseUpdate:
    return ReleaseUpdate(
        tag_name=request.new_tag,
        name=request.new_name,
        body=request.new_body,
        target_commitish=request.commitish,
        draft=request.new_draft_status,
    )
