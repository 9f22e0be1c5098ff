from typing import Literal

from pydantic import Field

from reportcards.schemas.base import CamelModel

Provider = Literal["lovable", "openai", "google", "anthropic"]
PROVIDERS: tuple[str, ...] = ("lovable", "openai", "google", "anthropic")
RewriteTargetKind = Literal["entry", "subjectComment", "generalComment"]


class RewriteRequest(CamelModel):
    # validated by hand in the endpoint so failures keep the {"error": ...} contract
    text: str | None = None
    style_guide: str | None = None
    student_name: str | None = None
    provider: str | None = None
    custom_api_key: str | None = None


class RewriteResponse(CamelModel):
    rewritten_text: str


class RewriteTarget(CamelModel):
    kind: RewriteTargetKind
    subject_id: str | None = None
    assessment_point_id: str | None = None

    @property
    def key(self) -> str:
        return ":".join((self.kind, self.subject_id or "", self.assessment_point_id or ""))


class StageRewriteRequest(CamelModel):
    target: RewriteTarget
    text: str | None = None
    provider: Provider = "lovable"
    custom_api_key: str | None = None


class StagedRewrite(CamelModel):
    target: RewriteTarget
    rewritten_text: str
    sequence: int = Field(default=0, ge=0)


class AcceptRewriteRequest(CamelModel):
    target: RewriteTarget
