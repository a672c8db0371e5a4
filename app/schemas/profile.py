from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: str
    username: str | None = None
    wab_id: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    location: str | None = None
    favorite_faction: str | None = None
    games_won: int = 0
    games_lost: int = 0
    social_discord: str | None = None
    social_twitter: str | None = None
    social_instagram: str | None = None
    social_youtube: str | None = None
    social_twitch: str | None = None


class ProfileUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    avatar_url: str | None = None
    bio: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    favorite_faction: str | None = None
    social_discord: str | None = None
    social_twitter: str | None = None
    social_instagram: str | None = None
    social_youtube: str | None = None
    social_twitch: str | None = None
