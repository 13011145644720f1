"""
Admin API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class ListUsersRequest(BaseModel):
    # Raw values; page numbers are parsed leniently by the service.
    model_config = ConfigDict(populate_by_name=True)

    page: int | str | None = None
    page_size: int | str | None = Field(default=None, alias="pageSize")
    search: str | None = Field(default=None, max_length=500)
    role: str | None = Field(default=None, max_length=50)


class SetRoleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_id: str = Field(..., alias="profileId", min_length=1)
    role: str = Field(..., min_length=1, max_length=50)


class BlockUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    block: StrictBool


class DeleteUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
