"""Pydantic models crossing the remote and presentation boundaries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from user_directory.domain.form_validator import FormDraft
from user_directory.domain.user import User


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class UserPayload(StrictModel):
    """JSON body sent on create (without id) and update (with id)."""

    user_id: int | None = Field(default=None, alias="id")
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    department: str

    @classmethod
    def from_draft(cls, draft: FormDraft, *, user_id: int | None = None) -> UserPayload:
        return cls(
            user_id=user_id,
            first_name=draft.first_name,
            last_name=draft.last_name,
            email=draft.email,
            department=draft.department,
        )

    def to_json_dict(self) -> dict[str, object]:
        """Serialize with wire names, omitting the id when unset."""

        return self.model_dump(by_alias=True, exclude_none=True)


class UserView(StrictModel):
    """One row as handed to the presentation layer."""

    user_id: int = Field(alias="id")
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    department: str

    @classmethod
    def from_user(cls, user: User) -> UserView:
        return cls(
            user_id=user.user_id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            department=user.department,
        )


class PageView(StrictModel):
    """Current page snapshot for the presentation layer."""

    items: list[UserView]
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=1)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)


class SyncStateView(StrictModel):
    """Outcome of the most recent remote call."""

    busy: bool
    last_error: str | None = None
    transient_message: str | None = None


class FormView(StrictModel):
    """Open create/edit dialog state."""

    editing_user_id: int | None = None
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    department: str = ""
    field_errors: dict[str, str] = Field(default_factory=dict)
