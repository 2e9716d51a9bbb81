# models/permissions.py

from typing import Any, Dict, Mapping, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from core.errors import UnknownModuleError
from models.enums import Action, EntryOverride, Module, Role


# ===============================================================
# MODULE / ACTION MATRIX
# ===============================================================

class ActionSet(BaseModel):
    """
    One boolean per action. None means the key was never set,
    which authorizes exactly like False.
    """
    model_config = ConfigDict(extra="forbid")

    view: Optional[StrictBool] = None
    create: Optional[StrictBool] = None
    edit: Optional[StrictBool] = None
    delete: Optional[StrictBool] = None

    def get(self, action: Action) -> Optional[bool]:
        return getattr(self, Action(action).value)

    def allows(self, action: Action) -> bool:
        return self.get(action) is True

    @classmethod
    def full(cls) -> "ActionSet":
        return cls(view=True, create=True, edit=True, delete=True)


class ModuleActionMatrix(BaseModel):
    """
    Mapping Module → ActionSet. A module missing from the mapping
    grants nothing.
    """
    modules: Dict[Module, ActionSet] = Field(default_factory=dict)

    def lookup(self, module: Module, action: Action) -> Optional[bool]:
        """Raw stored value for one cell (None when module or action is absent)."""
        action_set = self.modules.get(Module(module))
        if action_set is None:
            return None
        return action_set.get(action)

    def allows(self, module: Module, action: Action) -> bool:
        return self.lookup(module, action) is True

    def to_document(self) -> Dict[str, Dict[str, bool]]:
        """Serialize back to the stored JSON shape (unset actions omitted)."""
        return {
            module.value: action_set.model_dump(exclude_none=True)
            for module, action_set in self.modules.items()
        }

    @classmethod
    def grant_all(cls) -> "ModuleActionMatrix":
        return cls(modules={module: ActionSet.full() for module in Module})

    @classmethod
    def from_document(cls, raw: Optional[Mapping[str, Any]]) -> "ModuleActionMatrix":
        """
        Parse the stored `permissions` JSON.

        Unknown module or action keys, a module value that is not a
        mapping, and action values that are not real booleans all raise
        UnknownModuleError instead of being carried along silently.
        """
        if raw is not None and not isinstance(raw, Mapping):
            raise UnknownModuleError(f"Permission matrix must be a mapping, got {type(raw).__name__}")

        modules: Dict[Module, ActionSet] = {}
        for key, actions in (raw or {}).items():
            if key not in Module.list():
                raise UnknownModuleError(f"Unknown module '{key}'")
            actions = {} if actions is None else actions
            if not isinstance(actions, Mapping):
                raise UnknownModuleError(
                    f"Module '{key}' must map actions to booleans, got {actions!r}"
                )
            unknown = set(actions) - set(Action.list())
            if unknown:
                raise UnknownModuleError(
                    f"Unknown action(s) {sorted(unknown)} for module '{key}'"
                )
            # "true", 1 and "yes" are not grants
            for action_key, value in actions.items():
                if value is not None and not isinstance(value, bool):
                    raise UnknownModuleError(
                        f"{key}.{action_key} must be true, false or null, got {value!r}"
                    )
            modules[Module(key)] = ActionSet(
                **{k: v for k, v in actions.items() if v is not None}
            )
        return cls(modules=modules)


# ===============================================================
# STORED PERMISSION RECORDS
# ===============================================================

class PermissionRecord(BaseModel):
    permissions: ModuleActionMatrix
    last_updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None


class RolePermissionSet(PermissionRecord):
    role: Role

    @field_validator("role")
    @classmethod
    def _no_super_admin(cls, v: Role) -> Role:
        if v == Role.super_admin:
            raise ValueError("super_admin does not take a permission matrix")
        return v


class AgencyPermissionSet(PermissionRecord):
    agency_id: str


class UserPermissionSet(PermissionRecord):
    user_id: str


# ===============================================================
# PER-DOCUMENT ENTRY PERMISSIONS
# ===============================================================

class EntryPermissions(BaseModel):
    """
    Role → Action → EntryOverride, attached to one document.
    Anything not listed is `inherit`.
    """
    roles: Dict[Role, Dict[Action, EntryOverride]] = Field(default_factory=dict)

    def override_for(self, role: Role, action: Action) -> EntryOverride:
        return self.roles.get(Role(role), {}).get(Action(action), EntryOverride.inherit)

    def to_document(self) -> Dict[str, Dict[str, bool]]:
        """Stored shape: allow → True, deny → False, inherit omitted."""
        out: Dict[str, Dict[str, bool]] = {}
        for role, actions in self.roles.items():
            stored = {
                action.value: override == EntryOverride.allow
                for action, override in actions.items()
                if override != EntryOverride.inherit
            }
            if stored:
                out[role.value] = stored
        return out

    @classmethod
    def from_document(cls, raw: Optional[Mapping[str, Any]]) -> "EntryPermissions":
        if isinstance(raw, EntryPermissions):
            return raw
        if raw is not None and not isinstance(raw, Mapping):
            raise UnknownModuleError(f"Entry permissions must be a mapping, got {raw!r}")
        roles: Dict[Role, Dict[Action, EntryOverride]] = {}
        for role_key, actions in (raw or {}).items():
            if role_key not in Role.list():
                raise UnknownModuleError(f"Unknown role '{role_key}' in entry permissions")
            actions = {} if actions is None else actions
            if not isinstance(actions, Mapping):
                raise UnknownModuleError(
                    f"Entry permissions for role '{role_key}' must be a mapping, got {actions!r}"
                )
            parsed: Dict[Action, EntryOverride] = {}
            for action_key, value in actions.items():
                if action_key not in Action.list():
                    raise UnknownModuleError(
                        f"Unknown action '{action_key}' in entry permissions"
                    )
                parsed[Action(action_key)] = EntryOverride.from_raw(value)
            roles[Role(role_key)] = parsed
        return cls(roles=roles)
