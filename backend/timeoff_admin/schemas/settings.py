# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel

# Form values arrive untyped; the validation layer coerces them.
RawValue = str | int | float | bool | None

# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


class CompanyProfileForm(BaseModel):
    """General company settings."""

    name: RawValue = None
    country: RawValue = None
    date_format: RawValue = None
    timezone: RawValue = None
    carry_over: RawValue = None
    share_all_absences: RawValue = None
    is_team_view_hidden: RawValue = None


class ScheduleForm(BaseModel):
    """Working days of the company, or of one user when ``user_id`` is set."""

    user_id: uuid.UUID | None = None
    monday: RawValue = None
    tuesday: RawValue = None
    wednesday: RawValue = None
    thursday: RawValue = None
    friday: RawValue = None
    saturday: RawValue = None
    sunday: RawValue = None
    revoke_user_specific_schedule: RawValue = None


class IntegrationApiForm(BaseModel):
    integration_api_enabled: RawValue = None
    regenerate_token: RawValue = None


class LdapConfigurationForm(BaseModel):
    """New LDAP settings plus the acting user's directory password."""

    url: RawValue = None
    binddn: RawValue = None
    bindcredentials: RawValue = None
    searchbase: RawValue = None
    searchfilter: RawValue = None
    ldap_auth_enabled: RawValue = None
    allow_unauthorized_cert: RawValue = None
    password_to_check: RawValue = None


class CompanyRemovalForm(BaseModel):
    confirm_name: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class CompanyResponse(BaseModel):
    """Company profile as shown on the general settings page."""

    id: uuid.UUID
    name: str
    country: str
    date_format: str
    timezone: str
    carry_over: int
    share_all_absences: bool
    is_team_view_hidden: bool


class ScheduleResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID | None
    user_id: uuid.UUID | None
    monday: bool
    tuesday: bool
    wednesday: bool
    thursday: bool
    friday: bool
    saturday: bool
    sunday: bool


class CarryOverOption(BaseModel):
    days: int
    label: str


class CountryOption(BaseModel):
    code: str
    name: str


class IntegrationApiResponse(BaseModel):
    integration_api_enabled: bool
    integration_api_token: uuid.UUID


class AuthenticationSettingsResponse(BaseModel):
    """LDAP settings without the bind credentials."""

    ldap_auth_enabled: bool
    ldap_config: dict[str, Any]
