"""Field validation for settings forms.

Raw form values are trimmed and validated by a typed pydantic model per
settings category. Validation never raises for bad user input: each failing
field appends its message to the request's ``SettingsOutcome`` and the
returned attribute mapping is empty. Callers check ``outcome.has_errors()``
before persisting.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any
from zoneinfo import available_timezones

from pydantic import BaseModel, BeforeValidator, Field, ValidationError, ValidationInfo, field_validator, model_validator

from timeoff_admin.models.company import DATE_FORMATS
from timeoff_admin.models.leave_type import DEFAULT_COLOR

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from timeoff_admin.models.company import Company
    from timeoff_admin.schemas.outcome import SettingsOutcome

DateParser = Callable[[str], date | None]

_FALSY = {"", "0", "false", "off", "no"}

LDAP_URL_PATTERN = r"(?i)^ldaps?://[-a-z0-9.]+:[0-9]+$"
LDAP_USERNAME_PLACEHOLDER_PATTERN = r"\{\{username\}\}"
LEAVE_TYPE_COLOR_PATTERN = r"^leave_type_color_[0-9]+$"


def trim(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_boolean(value: Any) -> bool:
    """Loose form boolean: absent, empty, "0", "false", "off" and "no" are False."""
    if isinstance(value, bool):
        return value
    return trim(value).lower() not in _FALSY


@lru_cache(maxsize=1)
def known_timezones() -> frozenset[str]:
    return frozenset(available_timezones())


FormBool = Annotated[bool, BeforeValidator(to_boolean)]


class FormAttributes(BaseModel):
    """Validated attributes of one form; every raw value arrives trimmed."""

    @model_validator(mode="before")
    @classmethod
    def _trim_values(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {key: trim(value) for key, value in data.items()}
        return data


def validate_fields(
    model: type[FormAttributes],
    raw: Mapping[str, Any],
    messages: Mapping[str, str],
    outcome: SettingsOutcome,
    *,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate ``raw`` with ``model``; flash one error per failing field.

    ``messages`` maps a field name to its error message. A key of the form
    ``"<field>:<error type>"`` overrides the message for that error type.
    """
    try:
        return model.model_validate(raw, context=context).model_dump()
    except ValidationError as exc:
        failures: dict[str, ErrorDetails] = {}
        for error in exc.errors():
            if error["loc"]:
                failures.setdefault(str(error["loc"][0]), error)
        for name in model.model_fields:
            error = failures.get(name)
            if error is None:
                continue
            outcome.flash_error(messages.get(f"{name}:{error['type']}") or messages.get(name) or error["msg"])
        return {}


# ---------------------------------------------------------------------------
# Settings categories
# ---------------------------------------------------------------------------


class CompanyProfile(FormAttributes):
    name: str = ""
    country: str = Field(pattern=r"^[A-Za-z0-9]+$")
    timezone: str
    carry_over: int
    date_format: str
    share_all_absences: FormBool = False
    is_team_view_hidden: FormBool = False

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in known_timezones():
            msg = f"Unknown time zone {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("date_format")
    @classmethod
    def _known_date_format(cls, value: str) -> str:
        if value not in DATE_FORMATS:
            msg = f"Unknown date format {value!r}"
            raise ValueError(msg)
        return value


class BankHolidayAttributes(FormAttributes):
    """A bank holiday row; the date is read in the company's date format."""

    name: str = ""
    date: date

    @field_validator("date", mode="before")
    @classmethod
    def _company_date(cls, value: Any, info: ValidationInfo) -> Any:
        parser: DateParser = (info.context or {}).get("date_parser") or _parse_iso
        parsed = parser(trim(value))
        if parsed is None:
            msg = f"Unrecognised date {value!r}"
            raise ValueError(msg)
        return parsed


class LeaveTypeAttributes(FormAttributes):
    name: str = Field(min_length=1)
    color: str = Field(default=DEFAULT_COLOR, pattern=LEAVE_TYPE_COLOR_PATTERN)
    limit: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    use_allowance: FormBool = False
    auto_approve: FormBool = False

    @field_validator("color", mode="before")
    @classmethod
    def _default_color(cls, value: str) -> str:
        return value or DEFAULT_COLOR

    @field_validator("limit", mode="before")
    @classmethod
    def _default_limit(cls, value: str) -> str:
        return value or "0"


class LdapAttributes(FormAttributes):
    """New LDAP settings plus the acting user's directory password."""

    url: str = Field(pattern=LDAP_URL_PATTERN)
    binddn: str = ""
    bindcredentials: str = ""
    searchbase: str = ""
    searchfilter: str = Field(pattern=LDAP_USERNAME_PLACEHOLDER_PATTERN)
    allow_unauthorized_cert: FormBool = False
    ldap_auth_enabled: FormBool = False
    password_to_check: str = ""


def _parse_iso(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def validate_company_profile(raw: Mapping[str, Any], outcome: SettingsOutcome) -> dict[str, Any]:
    messages = {
        "country": "Country should contain only letters and numbers",
        "timezone": "Time zone is unknown",
        "carry_over": "Carried over allowance has to be a number",
        "date_format": "Unknown date format was provided",
    }
    return validate_fields(CompanyProfile, raw, messages, outcome)


def validate_bank_holiday(
    raw: Mapping[str, Any],
    company: Company,
    outcome: SettingsOutcome,
    *,
    item_name: str,
) -> dict[str, Any]:
    # Names are free text; escaping is the renderer's job.
    messages = {"date": f"New day for {item_name} should be date"}
    return validate_fields(
        BankHolidayAttributes, raw, messages, outcome, context={"date_parser": company.normalise_date}
    )


def validate_leave_type(
    raw: Mapping[str, Any],
    outcome: SettingsOutcome,
    *,
    item_name: str,
) -> dict[str, Any] | None:
    """Validate a leave type row. Returns None when the row carries no name."""
    if not trim(raw.get("name")):
        return None
    messages = {
        "color": f"New color for {item_name} should be valid css class",
        "limit": f"New limit for {item_name} should be a valide number",
        "limit:greater_than_equal": f"New limit for {item_name} should be positive number or 0",
    }
    return validate_fields(LeaveTypeAttributes, raw, messages, outcome)


def validate_ldap_configuration(raw: Mapping[str, Any], outcome: SettingsOutcome) -> dict[str, Any]:
    messages = {
        "url": "URL to LDAP server must be of following format: 'ldap://HOSTNAME:PORT'",
        "searchfilter": "LDAP filter must contain the {{username}} placeholder. "
        "Use '(mail={{username}})' to match mail as the username.",
    }
    return validate_fields(LdapAttributes, raw, messages, outcome)
