# models/actor.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.enums import Action, DecisionReason, Module, Role


# ===============================================================
# ACTOR - authenticated identity for one request
# ===============================================================
class Actor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    tenant_id: Optional[str] = None     # agency id
    active: bool = True
    email: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.super_admin


# ===============================================================
# DECISION - returned by every gate component
# ===============================================================
class DecisionContext(BaseModel):
    module: Optional[Module] = None
    action: Optional[Action] = None
    found: Optional[bool] = None            # raw matrix value, diagnostics only
    tenant_of_document: Optional[str] = None
    tenant_of_actor: Optional[str] = None


class Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    allow: bool
    reason: DecisionReason
    context: DecisionContext = Field(default_factory=DecisionContext)

    @classmethod
    def allowed(cls, reason: DecisionReason, **context) -> "Decision":
        return cls(allow=True, reason=reason, context=DecisionContext(**context))

    @classmethod
    def denied(cls, reason: DecisionReason, **context) -> "Decision":
        return cls(allow=False, reason=reason, context=DecisionContext(**context))
