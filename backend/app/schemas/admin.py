from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.user import AdminProfile


class AdminUserUpdate(BaseModel):
    """Fields an administrator may change on any account."""

    username: str | None = Field(None, min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr | None = None
    display_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=500)
    is_admin: bool | None = None
    is_public: bool | None = None
    favorite_genres: list[str] | None = None
    reading_goal: int | None = Field(None, ge=1, le=1000)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


class AdminUserList(BaseModel):
    users: list[AdminProfile]
    total_users: int
    total_pages: int
    current_page: int


class AdminStats(BaseModel):
    total_users: int
    total_admins: int
    new_users_this_month: int
    active_users: int


class AdminActionResult(BaseModel):
    message: str
    user_id: int
