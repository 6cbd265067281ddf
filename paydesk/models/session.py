"""Authenticated session model."""

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "superAdmin"]

ADMIN: Role = "admin"
SUPERADMIN: Role = "superAdmin"


def normalize_role(role: str | None) -> Role:
    """Map the role spellings the API returns onto the two known roles.

    Anything unrecognised is treated as a merchant admin.
    """
    if role in ("superAdmin", "superadmin", "SUPERADMIN"):
        return SUPERADMIN
    return ADMIN


class AuthSession(BaseModel):
    """A logged-in merchant or superadmin."""

    token: str = Field(description="JWT sent as the x-auth-token header")
    role: Role = Field(default=ADMIN, description="Normalised user role")
    user_id: str | None = Field(default=None, description="Backend user id")
    business_name: str | None = Field(default=None, description="Merchant business name")
    email: str | None = Field(default=None, description="Login email")

    @property
    def is_superadmin(self) -> bool:
        return self.role == SUPERADMIN

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN
