"""
Pydantic models for projects, locations, technicians and profiles.
"""

import re
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')

LocationType = Literal['residential', 'commercial']
EmploymentType = Literal['contractor', 'employee']
CostBasis = Literal['hourly', 'salary', 'per_stop', 'other']


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError('may not be null')
    return value


class ProjectCreate(BaseModel):
    organization_id: UUID
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class ProjectUpdate(BaseModel):
    # organization_id is accepted but never applied
    model_config = ConfigDict(extra='ignore')

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    organization_id: UUID | None = None

    @field_validator('name')
    @classmethod
    def name_not_null(cls, value: str | None) -> str:
        return _reject_null(value)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class LocationFields(BaseModel):
    address_line2: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None
    is_active: bool | None = None


class LocationCreate(LocationFields):
    organization_id: UUID
    name: str = Field(min_length=1)
    type: LocationType
    address_line1: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)


class LocationUpdate(LocationFields):
    model_config = ConfigDict(extra='ignore')

    organization_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1)
    type: LocationType | None = None
    address_line1: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    state: str | None = Field(default=None, min_length=1)
    postal_code: str | None = Field(default=None, min_length=1)

    @field_validator(
        'name',
        'type',
        'address_line1',
        'city',
        'state',
        'postal_code',
        'country',
        'is_active',
    )
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return _reject_null(value)


class LocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    type: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LocationImportRequest(BaseModel):
    """Rows already parsed from a CSV file by the client."""

    organization_id: UUID
    locations: list[dict[str, Any]] = Field(min_length=1)


class GeocodeBulkRequest(BaseModel):
    location_ids: list[UUID] = Field(min_length=1)


class BulkResult(BaseModel):
    success: int
    failed: int
    errors: list[dict[str, Any]]


def _normalize_color(value: str | None) -> str | None:
    if value is None:
        return None
    if not HEX_COLOR_RE.match(value):
        raise ValueError('color_hex must look like #RRGGBB')
    return value.upper()


class TechnicianFields(BaseModel):
    email: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    notes: str | None = None


class TechnicianCreate(TechnicianFields):
    organization_id: UUID
    full_name: str = Field(min_length=2)
    employment_type: EmploymentType
    cost_basis: CostBasis = 'hourly'
    cost_amount: float = Field(default=0, ge=0)
    color_hex: str = '#22C55E'
    active: bool = True

    @field_validator('color_hex')
    @classmethod
    def normalize_color(cls, value: str) -> str:
        return _normalize_color(value)


class TechnicianUpdate(TechnicianFields):
    model_config = ConfigDict(extra='ignore')

    organization_id: UUID | None = None
    full_name: str | None = Field(default=None, min_length=2)
    employment_type: EmploymentType | None = None
    cost_basis: CostBasis | None = None
    cost_amount: float | None = Field(default=None, ge=0)
    color_hex: str | None = None
    active: bool | None = None

    @field_validator('color_hex')
    @classmethod
    def normalize_color(cls, value: str | None) -> str:
        return _normalize_color(_reject_null(value))

    @field_validator(
        'full_name', 'employment_type', 'cost_basis', 'cost_amount', 'active'
    )
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return _reject_null(value)


class TechnicianResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    created_by: UUID | None = None
    full_name: str
    employment_type: str
    email: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    cost_basis: str
    cost_amount: float
    color_hex: str
    active: bool
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class TechnicianPage(BaseModel):
    data: list[TechnicianResponse]
    count: int
    page: int
    page_size: int
    total_pages: int


class ProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime
    updated_at: datetime


class MyProfileResponse(ProfileResponse):
    email: str
