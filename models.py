"""
Tool request and result models for gitlab_get_mr_comments.
"""
import json
from typing import Any, Dict, List, Literal, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator, model_validator

from errors import ValidationError
from normalize.models import Comment
from selection.filters import FilterOptions

FORMAT_STRUCTURED = "structured"
FORMAT_DIGEST = "digest"
FORMAT_ALIASES = {
    "structured": FORMAT_STRUCTURED,
    "json": FORMAT_STRUCTURED,
    "digest": FORMAT_DIGEST,
    "markdown": FORMAT_DIGEST,
}
MIN_PER_PAGE = 1
MAX_PER_PAGE = 100


def _describe_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "").removeprefix("Value error, ")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts)


class CommentsRequest(BaseModel):
    """
    Validated tool input, keyed by the camelCase argument names agents send.
    Building one through from_arguments raises errors.ValidationError before any network activity.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    project: str = Field(min_length=1, description="Project path ('group/project') or numeric id")
    mr: StrictInt = Field(gt=0, description="Merge request IID (the !123 number)")
    include_system: StrictBool = Field(False, alias="includeSystem")
    include_overview_notes: StrictBool = Field(True, alias="includeOverviewNotes")
    only_resolved: StrictBool = Field(False, alias="onlyResolved")
    only_unresolved: StrictBool = Field(False, alias="onlyUnresolved")
    per_page: StrictInt = Field(MAX_PER_PAGE, ge=MIN_PER_PAGE, le=MAX_PER_PAGE, alias="perPage")
    format: Literal["structured", "digest"] = FORMAT_STRUCTURED

    @field_validator("mr", mode="before")
    @classmethod
    def coerce_mr(cls, value: Any) -> Any:
        # numeric strings such as "123" are accepted; anything else is left to the strict int check
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return value

    @field_validator("format", mode="before")
    @classmethod
    def resolve_format_alias(cls, value: Any) -> Any:
        if isinstance(value, str):
            return FORMAT_ALIASES.get(value.strip().lower(), value)
        return value

    @model_validator(mode="after")
    def check_resolution_filters(self) -> "CommentsRequest":
        if self.only_resolved and self.only_unresolved:
            raise ValueError("Cannot set both onlyResolved and onlyUnresolved")
        return self

    @classmethod
    def from_arguments(cls, arguments: Optional[Mapping[str, Any]]) -> "CommentsRequest":
        """Build from camelCase tool arguments; absent or None values take their defaults."""
        args = {k: v for k, v in dict(arguments or {}).items() if v is not None}
        try:
            return cls.model_validate(args)
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe_errors(exc)) from exc

    @property
    def filter_options(self) -> FilterOptions:
        return FilterOptions(
            include_system=self.include_system,
            only_resolved=self.only_resolved,
            only_unresolved=self.only_unresolved,
        )


class CommentsResult:
    """
    Outcome of one pipeline run: filtered comments, raw collection counts and the optional digest.
    """

    def __init__(self, project: str, mr: int, fetched_at: str, comments: List[Comment], discussion_count: int, note_count: int, digest: Optional[str] = None):
        self.project = project
        self.mr = mr
        self.fetched_at = fetched_at
        self.comments = comments
        self.discussion_count = discussion_count
        self.note_count = note_count
        self.digest = digest

    @property
    def counts(self) -> Dict[str, int]:
        return {
            "comments": len(self.comments),
            "discussions": self.discussion_count,
            "notes": self.note_count,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "project": self.project,
            "mr": self.mr,
            "fetchedAt": self.fetched_at,
            "counts": self.counts,
            "comments": [c.to_dict() for c in self.comments],
        }
        if self.digest is not None:
            data["digest"] = self.digest
        return data

    def payload(self, fmt: str = FORMAT_STRUCTURED) -> str:
        """Text returned to the invoking agent: the digest itself, or the structured result as JSON."""
        if fmt == FORMAT_DIGEST and self.digest is not None:
            return self.digest
        return json.dumps(self.to_dict(), indent=2)


__all__ = ["CommentsRequest", "CommentsResult", "FORMAT_STRUCTURED", "FORMAT_DIGEST"]
