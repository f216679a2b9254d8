"""Capability checks for the approval workflow.

Each operation asks for one decision up front and enforces it before touching
any state. A decision is one of:

- ``allow``: proceed through the normal request workflow
- ``bypass``: caller is an administrator and applies the change directly
- ``deny``: refuse with the attached reason
"""

import enum
import uuid
from dataclasses import dataclass

from fastapi import HTTPException

from app.models.document import Document
from app.models.person import PersonRole


@dataclass(frozen=True)
class Principal:
    id: uuid.UUID
    role: PersonRole

    @property
    def is_admin(self) -> bool:
        return self.role == PersonRole.admin


class Effect(enum.Enum):
    allow = "allow"
    bypass = "bypass"
    deny = "deny"


@dataclass(frozen=True)
class Decision:
    effect: Effect
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(Effect.allow)

    @classmethod
    def bypass(cls) -> "Decision":
        return cls(Effect.bypass)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(Effect.deny, reason)

    @property
    def is_bypass(self) -> bool:
        return self.effect == Effect.bypass


def decide_document_change(
    principal: Principal, document: Document, action: str
) -> Decision:
    """Who may delete/replace ``document``: admins directly, owners via request."""
    if principal.is_admin:
        return Decision.bypass()
    if document.created_by != principal.id:
        return Decision.deny(f"Only owner can request {action}")
    return Decision.allow()


def decide_resolution(principal: Principal) -> Decision:
    """Only administrators resolve or list permission requests."""
    if principal.is_admin:
        return Decision.allow()
    return Decision.deny("Admin only")


def enforce(decision: Decision) -> Decision:
    if decision.effect == Effect.deny:
        raise HTTPException(status_code=403, detail=decision.reason)
    return decision
