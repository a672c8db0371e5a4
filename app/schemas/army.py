"""Pydantic schemas for army lists."""

from pydantic import BaseModel, Field


class UnitDefinition(BaseModel):
    """A unit as it appears in the faction catalogue."""

    id: str
    name: str
    faction: str
    points_cost: int = Field(..., ge=0)
    availability: int = Field(..., ge=0, description="Maximum copies allowed in one list")
    command: int | None = None
    keywords: list[str] = Field(default_factory=list)
    special_rules: list[str] | None = None
    high_command: bool = False
    image_url: str | None = None


class SelectedUnit(BaseModel):
    """A unit entry in a list, with the number of copies taken."""

    id: str
    name: str
    points_cost: int = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    faction: str
    keywords: list[str] = Field(default_factory=list)
    high_command: bool = False
    availability: int = Field(..., ge=0)
    image_url: str | None = None
    special_rules: list[str] | None = None
    command: int | None = None


class SavedList(BaseModel):
    id: str
    name: str
    faction: str
    units: list[SelectedUnit] = Field(default_factory=list)
    created_at: str
    user_id: str | None = None
    wab_id: str | None = None


class ShareListResponse(BaseModel):
    """Response from generating a share link."""

    code: str = Field(..., description="URL-safe share token")
    url: str = Field(..., description="Full shareable link")


class ExportListRequest(BaseModel):
    list: SavedList
    courtesy: bool = Field(
        False,
        description="Hide units with the Scout or Ambusher keyword",
    )


class ExportListResponse(BaseModel):
    text: str
    total_points: int
    total_command: int


class AddUnitRequest(BaseModel):
    faction: str
    units: list[SelectedUnit] = Field(default_factory=list)
    unit: UnitDefinition


class AddUnitResponse(BaseModel):
    units: list[SelectedUnit]
    total_points: int


class SaveListRequest(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1, max_length=100)
    faction: str
    units: list[SelectedUnit] = Field(default_factory=list)
    wab_id: str | None = None
