"""Pydantic schemas for the candidate interview API."""
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from flow_manager import CompletionSummary, FieldEditResult, FlowSnapshot, Notice


NavigateAction = Literal["next", "previous", "jump"]


class AnswerReq(BaseModel):
    value: Any


class NavigateReq(BaseModel):
    action: NavigateAction
    step: Optional[int] = Field(default=None, ge=1)


class SubmitReq(BaseModel):
    confirmed: bool = False


class AnswerResp(BaseModel):
    edit: FieldEditResult
    completion: CompletionSummary
    notices: List[Notice] = Field(default_factory=list)


class SubmitDenied(BaseModel):  # Body of a 422 from the submission gate
    reasons: List[str]
    completion: CompletionSummary


class SignOutResp(BaseModel):
    flushed: int = 0


StateResp = FlowSnapshot
