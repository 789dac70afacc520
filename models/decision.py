# models/decision.py

from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field

from models.enums import DecisionKind


# ===============================================================
# GUARD DECISION (tagged union, created fresh per evaluation)
# ===============================================================

class _Decision(BaseModel):
    model_config = ConfigDict(frozen=True)


class Render(_Decision):
    kind: Literal[DecisionKind.render] = DecisionKind.render


class RedirectTo(_Decision):
    kind: Literal[DecisionKind.redirect] = DecisionKind.redirect
    path: str


class Pending(_Decision):
    kind: Literal[DecisionKind.pending] = DecisionKind.pending


GuardDecision = Annotated[
    Union[Render, RedirectTo, Pending],
    Field(discriminator="kind"),
]
