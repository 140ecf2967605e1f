"""Company settings pipeline.

Every mutating operation runs the same stages: validate the raw form into a
typed attribute set, load the aggregate it applies to, mutate it in memory,
then persist. Each stage can reject the request; the result is always a
``SettingsOutcome`` carrying flashed errors, confirmation messages and the
page to go back to. Failures are logged and turned into flashed errors, they
never escape to the caller.
"""

from __future__ import annotations

import asyncio
import csv
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from itertools import count
from typing import TYPE_CHECKING, Any

from timeoff_admin.config import get_settings
from timeoff_admin.countries import COUNTRIES, default_bank_holidays
from timeoff_admin.exceptions import (
    AppError,
    DomainConflictError,
    ExternalDependencyError,
    NotFoundError,
    extract_system_error_message,
    extract_user_error_message,
)
from timeoff_admin.models.audit import AuditRecord
from timeoff_admin.models.company import CARRY_OVER_ALL, Company
from timeoff_admin.models.enums import AuditEntityType
from timeoff_admin.models.feed import UserFeed
from timeoff_admin.models.holiday import BankHoliday
from timeoff_admin.models.leave import Leave
from timeoff_admin.models.leave_type import LeaveType
from timeoff_admin.models.schedule import WEEKDAYS, Schedule
from timeoff_admin.models.user import User, UserAllowanceAdjustment
from timeoff_admin.schemas.general import GeneralSettingsResponse
from timeoff_admin.schemas.holiday import BankHolidayResponse
from timeoff_admin.schemas.leave_type import LeaveTypeResponse
from timeoff_admin.schemas.outcome import SettingsOutcome
from timeoff_admin.schemas.settings import (
    AuthenticationSettingsResponse,
    CarryOverOption,
    CompanyResponse,
    CountryOption,
    IntegrationApiResponse,
    ScheduleResponse,
)
from timeoff_admin.services.audit import record_changes
from timeoff_admin.services.calendar import get_company_schedule
from timeoff_admin.services.carryover import calculate_carry_over_allowance
from timeoff_admin.services.directory import DirectoryAuthenticationError, LdapConfig, verify_credentials
from timeoff_admin.validation import (
    known_timezones,
    to_boolean,
    trim,
    validate_bank_holiday,
    validate_company_profile,
    validate_ldap_configuration,
    validate_leave_type,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from timeoff_admin.repository import PolicyRepository
    from timeoff_admin.schemas.holiday import BankHolidaysForm
    from timeoff_admin.schemas.leave_type import LeaveTypesForm
    from timeoff_admin.schemas.settings import (
        CompanyProfileForm,
        CompanyRemovalForm,
        IntegrationApiForm,
        LdapConfigurationForm,
        ScheduleForm,
    )
    from timeoff_admin.services.directory import DirectoryAuthenticator

logger = logging.getLogger(__name__)

GENERAL_SETTINGS_PATH = "/settings/general/"
AUTHENTICATION_PATH = "/settings/company/authentication/"
INTEGRATION_API_PATH = "/settings/company/integration-api/"
USERS_PATH = "/users/"
HOME_PATH = "/"

NEW_ROW = "new"
LEAVE_TYPES_FAILURE = "Failed to update leave types details, please contact customer service"


def carry_over_options() -> list[CarryOverOption]:
    """Choices offered for the carried over allowance policy."""
    return [
        CarryOverOption(days=0, label="None"),
        *(CarryOverOption(days=days, label=str(days)) for days in range(1, 21)),
        CarryOverOption(days=CARRY_OVER_ALL, label="All"),
    ]


async def _load_company(
    repository: PolicyRepository,
    company_id: uuid.UUID,
    includes: Sequence[str] = (),
) -> Company:
    company = await repository.find_one(Company, {"id": company_id}, includes)
    if company is None:
        msg = "Company not found"
        raise NotFoundError(msg)
    return company


def _flash_failure(outcome: SettingsOutcome, exc: BaseException, message: str) -> None:
    """Flash the user-safe part of ``exc`` (if any) followed by ``message``."""
    if isinstance(exc, AppError) and exc.show_to_user:
        outcome.flash_error(exc.message)
    outcome.flash_error(message)


async def _update_audited(
    repository: PolicyRepository,
    actor: User,
    entity_type: AuditEntityType,
    entity: Any,
    attributes: Mapping[str, Any],
    *,
    old_state: Mapping[str, Any] | None = None,
) -> None:
    if old_state is None:
        old_state = entity.attributes(*attributes)
    await repository.update(entity, attributes)
    await record_changes(
        repository,
        company_id=actor.company_id,
        by_user_id=actor.id,
        entity_type=entity_type,
        entity_id=entity.id,
        old_state=old_state,
        new_state=attributes,
    )


# ---------------------------------------------------------------------------
# General settings
# ---------------------------------------------------------------------------


def _schedule_response(schedule: Schedule) -> ScheduleResponse:
    return ScheduleResponse(
        id=schedule.id,
        company_id=schedule.company_id,
        user_id=schedule.user_id,
        **schedule.attributes(*WEEKDAYS),
    )


async def get_general_settings(repository: PolicyRepository, actor: User) -> GeneralSettingsResponse:
    """Everything shown on the general settings page."""
    company = await _load_company(repository, actor.company_id, ("bank_holidays", "leave_types"))
    schedule = await get_company_schedule(repository, company.id)
    year_current = company.get_today().year
    leave_types = sorted(company.leave_types, key=lambda lt: (-lt.sort_order, lt.name))

    return GeneralSettingsResponse(
        company=CompanyResponse.model_validate(company, from_attributes=True),
        schedule=_schedule_response(schedule),
        bank_holidays=[BankHolidayResponse.model_validate(h, from_attributes=True) for h in company.bank_holidays],
        leave_types=[LeaveTypeResponse.model_validate(lt, from_attributes=True) for lt in leave_types],
        countries=[
            CountryOption(code=country.code, name=country.name)
            for country in sorted(COUNTRIES.values(), key=lambda c: c.name)
        ],
        timezones_available=sorted(known_timezones()),
        date_formats=Company.get_available_date_formats(),
        carry_over_options=carry_over_options(),
        year_current=year_current,
        year_prev=year_current - 1,
    )


async def update_company(repository: PolicyRepository, actor: User, form: CompanyProfileForm) -> SettingsOutcome:
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    attributes = validate_company_profile(form.model_dump(), outcome)
    if outcome.has_errors():
        return outcome
    if not attributes.get("name"):
        attributes.pop("name", None)

    try:
        company = await _load_company(repository, actor.company_id)
        await _update_audited(repository, actor, AuditEntityType.COMPANY, company, attributes)
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to update company details for user %s", actor_id)
        await repository.rollback()
        _flash_failure(outcome, exc, "Failed to update company details, please contact customer service")
        return outcome

    outcome.flash_message("Company was successfully updated")
    return outcome


async def carry_over_unused_allowance(repository: PolicyRepository, actor: User) -> SettingsOutcome:
    """Carry the unused allowance of every company user into the current year."""
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id)
        users = await repository.find_all(User, {"company_id": company.id})
        await calculate_carry_over_allowance(repository, company, users)
    except Exception:
        marker = uuid.uuid4()
        logger.exception("[%s] Failed to carry over unused allowance by user %s", marker, actor_id)
        await repository.rollback()
        outcome.flash_error(
            "Failed to carry over unused allowances, please contact customer service "
            f"and provide incident ID: {marker}"
        )
        return outcome

    outcome.flash_message("Unused allowance was successfully carried over")
    return outcome


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


async def update_schedule(repository: PolicyRepository, actor: User, form: ScheduleForm) -> SettingsOutcome:
    """Save the company schedule, or the schedule of one user when ``user_id`` is given.

    A user without a schedule of their own gets one built from the defaults.
    Revoking a user schedule removes it so the user obeys the company schedule again.
    """
    outcome = SettingsOutcome()
    company_id, actor_id = actor.company_id, actor.id
    user_specific = form.user_id is not None
    days = {day: to_boolean(getattr(form, day)) for day in WEEKDAYS}

    if user_specific:
        outcome.redirect(f"/users/edit/{form.user_id}/schedule/")
    else:
        outcome.redirect(GENERAL_SETTINGS_PATH)

    try:
        if form.user_id is None:
            schedule = await get_company_schedule(repository, company_id)
        else:
            user = await repository.find_one(User, {"id": form.user_id, "company_id": company_id})
            if user is None:
                outcome.redirect(USERS_PATH)
                msg = "User not found"
                raise NotFoundError(msg)
            existing = await repository.find_one(Schedule, {"user_id": user.id})
            if to_boolean(form.revoke_user_specific_schedule):
                if existing is not None:
                    await repository.destroy(existing)
                    await repository.commit()
                outcome.flash_message("Schedule for user was saved")
                return outcome
            schedule = existing if existing is not None else Schedule(user_id=user.id)

        await _update_audited(repository, actor, AuditEntityType.SCHEDULE, schedule, days)
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to save schedule for company %s by user %s", company_id, actor_id)
        await repository.rollback()
        _flash_failure(outcome, exc, "Failed to save user schedule" if user_specific else "Failed to save company schedule")
        return outcome

    outcome.flash_message("Schedule for user was saved" if user_specific else "Schedule for company was saved")
    return outcome


# ---------------------------------------------------------------------------
# Bank holidays
# ---------------------------------------------------------------------------


async def update_bank_holidays(repository: PolicyRepository, actor: User, form: BankHolidaysForm) -> SettingsOutcome:
    """Apply row edits to existing bank holidays and add an optional new one.

    A failing new row rejects the request before anything is written. A
    failing existing row cancels every row edit, while a valid new row is
    still created. Two holidays may never end up on the same day, whatever
    order the rows arrive in.
    """
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id, ("bank_holidays",))
        holidays = {holiday.id: holiday for holiday in company.bank_holidays}

        new_attributes = None
        if form.new is not None and trim(form.new.name):
            new_attributes = validate_bank_holiday(
                form.new.model_dump(), company, outcome, item_name="New Bank Holiday"
            )
            if outcome.has_errors():
                return outcome

        row_updates = []
        for row in form.rows:
            holiday = holidays.get(row.id)
            if holiday is None:
                outcome.flash_error("Cannot update bank holiday: wronge parameters")
                continue
            attributes = validate_bank_holiday(
                row.model_dump(exclude={"id"}), company, outcome, item_name=holiday.name
            )
            if not attributes.get("name"):
                attributes.pop("name", None)
            row_updates.append((holiday, attributes))

        final_dates = {holiday.id: holiday.date for holiday in holidays.values()}
        if not outcome.has_errors():
            final_dates.update({holiday.id: attributes["date"] for holiday, attributes in row_updates})
            for day in _shared_dates(final_dates.values()):
                outcome.flash_error(f"More than one bank holiday is set for {day.isoformat()}")

        if new_attributes is not None and new_attributes["date"] in final_dates.values():
            outcome.flash_error(f"Bank holiday for {new_attributes['date'].isoformat()} already exists")
            return outcome

        if not outcome.has_errors():
            old_states = [holiday.attributes(*attributes) for holiday, attributes in row_updates]
            await _park_moved_holidays(repository, row_updates, set(final_dates.values()))
            await asyncio.gather(
                *(
                    _update_audited(
                        repository, actor, AuditEntityType.BANK_HOLIDAY, holiday, attributes, old_state=old_state
                    )
                    for (holiday, attributes), old_state in zip(row_updates, old_states, strict=True)
                )
            )
            await repository.flush()
        if new_attributes is not None:
            await repository.create(BankHoliday, {**new_attributes, "company_id": company.id})
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to edit bank holidays by user %s", actor_id)
        await repository.rollback()
        _flash_failure(outcome, exc, "Failed to update bank holidayes details, please contact customer service")
        return outcome

    if not outcome.has_errors():
        outcome.flash_message("Changes to bank holidays were saved")
    return outcome


def _shared_dates(days: Iterable[date]) -> list[date]:
    seen: set[date] = set()
    shared: set[date] = set()
    for day in days:
        if day in seen:
            shared.add(day)
        seen.add(day)
    return sorted(shared)


async def _park_moved_holidays(
    repository: PolicyRepository,
    row_updates: Sequence[tuple[BankHoliday, Mapping[str, Any]]],
    taken: set[date],
) -> None:
    """Move holidays whose date changes onto unused placeholder days.

    The rows then take their final dates in a second write, so swapping or
    rotating dates never hits the one-holiday-per-day constraint part way.
    """
    moved = [holiday for holiday, attributes in row_updates if attributes["date"] != holiday.date]
    if len(moved) < 2:
        return
    taken = taken | {holiday.date for holiday in moved}
    placeholders = (day for day in (date.min + timedelta(days=offset) for offset in count()) if day not in taken)
    for holiday, placeholder in zip(moved, placeholders, strict=False):
        await repository.update(holiday, {"date": placeholder})
    await repository.flush()


async def import_bank_holidays(repository: PolicyRepository, actor: User) -> SettingsOutcome:
    """Add the default bank holidays of the company's country for the current year.

    Dates the company already has are skipped, so importing twice adds nothing.
    """
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id, ("bank_holidays",))
        existing_dates = {holiday.date for holiday in company.bank_holidays}
        country = company.country or get_settings().default_country

        to_import: list[dict[str, Any]] = []
        for name, day in default_bank_holidays(country, company.get_today().year):
            if day in existing_dates:
                continue
            existing_dates.add(day)
            to_import.append({"name": name, "date": day, "company_id": company.id})

        await repository.bulk_create(BankHoliday, to_import)
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to import default bank holidays by user %s", actor_id)
        await repository.rollback()
        _flash_failure(outcome, exc, "Failed to import bank holidays")
        return outcome

    if to_import:
        outcome.flash_message("New bank holidays were added: " + ", ".join(row["name"] for row in to_import))
    else:
        outcome.flash_message("No more new bank holidays exist")
    return outcome


async def delete_bank_holiday(repository: PolicyRepository, actor: User, index: str) -> SettingsOutcome:
    """Remove the bank holiday at ``index`` of the date ordered list."""
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        position = int(trim(index))
    except ValueError:
        logger.error("User %s submitted non-int bank holiday number %r", actor_id, index)
        outcome.flash_error("Cannot remove bank holiday: wronge parameters")
        return outcome

    try:
        company = await _load_company(repository, actor.company_id, ("bank_holidays",))
        if position < 0 or position >= len(company.bank_holidays):
            msg = "Cannot remove bank holiday: wronge parameters"
            raise DomainConflictError(
                msg,
                system_message=(
                    f"User {actor_id} tried to remove non-existing bank holiday number {position} "
                    f"out of {len(company.bank_holidays)}"
                ),
            )
        await repository.destroy(company.bank_holidays[position])
        await repository.commit()
    except DomainConflictError as exc:
        logger.error(extract_system_error_message(exc))
        await repository.rollback()
        outcome.flash_error(exc.message)
        return outcome
    except Exception:
        logger.exception("Failed to remove bank holiday by user %s", actor_id)
        await repository.rollback()
        outcome.flash_error("Failed to remove bank holiday, please contact customer service")
        return outcome

    outcome.flash_message("Bank holiday was successfully removed")
    return outcome


# ---------------------------------------------------------------------------
# Leave types
# ---------------------------------------------------------------------------


def _sort_order(first_record: str | None, row_key: str) -> int:
    return 1 if first_record and trim(first_record) == row_key else 0


async def update_leave_types(repository: PolicyRepository, actor: User, form: LeaveTypesForm) -> SettingsOutcome:
    """Apply row edits to existing leave types and add an optional new one.

    Rows without a name are left untouched. The batch follows the same
    rules as bank holidays: any failing row cancels every row edit while a
    valid new leave type is still created.
    """
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id, ("leave_types",))
        leave_types = {leave_type.id: leave_type for leave_type in company.leave_types}

        new_attributes = None
        if form.new is not None:
            new_attributes = validate_leave_type(form.new.model_dump(), outcome, item_name="New Leave Type")
            if outcome.has_errors():
                outcome.flash_error(LEAVE_TYPES_FAILURE)
                return outcome
            if new_attributes is not None:
                new_attributes["sort_order"] = _sort_order(form.first_record, NEW_ROW)

        row_updates = []
        for row in form.rows:
            leave_type = leave_types.get(row.id)
            if leave_type is None:
                outcome.flash_error("Cannot update leave type: wronge parameters")
                continue
            attributes = validate_leave_type(
                row.model_dump(exclude={"id"}), outcome, item_name=leave_type.name
            )
            if attributes is None:
                continue
            attributes["sort_order"] = _sort_order(form.first_record, str(leave_type.id))
            row_updates.append((leave_type, attributes))

        if new_attributes is not None:
            await repository.create(LeaveType, {**new_attributes, "company_id": company.id})
        if not outcome.has_errors():
            await asyncio.gather(
                *(
                    _update_audited(repository, actor, AuditEntityType.LEAVE_TYPE, leave_type, attributes)
                    for leave_type, attributes in row_updates
                )
            )
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to edit leave types by user %s", actor_id)
        await repository.rollback()
        _flash_failure(outcome, exc, LEAVE_TYPES_FAILURE)
        return outcome

    if outcome.has_errors():
        outcome.flash_error(LEAVE_TYPES_FAILURE)
    else:
        outcome.flash_message("Changes to leave types were saved")
    return outcome


async def delete_leave_type(repository: PolicyRepository, actor: User, leave_type_id: str) -> SettingsOutcome:
    """Remove a leave type that no leave refers to."""
    outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id, ("leave_types", "leave_types.leaves"))
        leave_type = next((lt for lt in company.leave_types if str(lt.id) == trim(leave_type_id)), None)
        if leave_type is None:
            msg = "Cannot remove leave type: wronge parameters"
            raise DomainConflictError(
                msg,
                system_message=(
                    f"User {actor_id} tried to remove non-existing leave type {leave_type_id} "
                    f"out of {len(company.leave_types)}"
                ),
            )
        if leave_type.leaves:
            msg = "Cannot remove leave type: type is in use"
            raise DomainConflictError(msg, system_message=f"Leave type {leave_type.id} is in use")

        await repository.destroy(leave_type)
        await repository.commit()
    except Exception as exc:
        logger.error(
            "Failed to remove leave type by user %s: %s", actor_id, extract_system_error_message(exc), exc_info=exc
        )
        await repository.rollback()
        _flash_failure(outcome, exc, "Failed to remove Leave Type")
        return outcome

    outcome.flash_message("Leave type was successfully removed")
    return outcome


# ---------------------------------------------------------------------------
# Integration API
# ---------------------------------------------------------------------------


async def get_integration_api(repository: PolicyRepository, actor: User) -> IntegrationApiResponse:
    company = await _load_company(repository, actor.company_id)
    return IntegrationApiResponse(
        integration_api_enabled=company.integration_api_enabled,
        integration_api_token=company.integration_api_token,
    )


async def update_integration_api(
    repository: PolicyRepository, actor: User, form: IntegrationApiForm
) -> SettingsOutcome:
    """Switch the integration API on or off, optionally issuing a new token."""
    outcome = SettingsOutcome().redirect(INTEGRATION_API_PATH)
    enabled = to_boolean(form.integration_api_enabled)

    try:
        company = await _load_company(repository, actor.company_id)
        await _update_audited(
            repository, actor, AuditEntityType.COMPANY, company, {"integration_api_enabled": enabled}
        )
        if to_boolean(form.regenerate_token):
            await repository.update(company, {"integration_api_token": uuid.uuid4()})
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to save Integration API configuration: %s", extract_system_error_message(exc))
        await repository.rollback()
        outcome.flash_error(f"Failed to save settings. {extract_user_error_message(exc)}")
        return outcome

    outcome.flash_message("Settings were saved")
    return outcome


# ---------------------------------------------------------------------------
# LDAP authentication
# ---------------------------------------------------------------------------


async def get_authentication(repository: PolicyRepository, actor: User) -> AuthenticationSettingsResponse:
    """Current LDAP settings; the bind credentials are never returned."""
    company = await _load_company(repository, actor.company_id)
    config = dict(company.ldap_auth_config or {})
    config.pop("bindcredentials", None)
    return AuthenticationSettingsResponse(ldap_auth_enabled=company.ldap_auth_enabled, ldap_config=config)


async def update_ldap_configuration(
    repository: PolicyRepository,
    actor: User,
    form: LdapConfigurationForm,
    *,
    authenticator: DirectoryAuthenticator,
) -> SettingsOutcome:
    """Save new LDAP settings once the acting user can sign in with them.

    The new configuration is applied to the company in memory only and
    checked against the directory with the acting user's email and the
    password they supplied. Nothing is saved unless the check succeeds, so
    an administrator cannot lock themselves out.
    """
    outcome = SettingsOutcome().redirect(AUTHENTICATION_PATH)
    actor_id, actor_email = actor.id, actor.email

    parameters = validate_ldap_configuration(form.model_dump(), outcome)
    if outcome.has_errors():
        outcome.flash_error("Failed to update LDAP configuration. Validation failed")
        return outcome

    password = parameters.pop("password_to_check")
    enabled = parameters.pop("ldap_auth_enabled")
    config = LdapConfig(**parameters)

    try:
        company = await _load_company(repository, actor.company_id)
        old_state = company.attributes("ldap_auth_enabled")
        await repository.update(company, {"ldap_auth_config": config.model_dump(), "ldap_auth_enabled": enabled})

        try:
            await verify_credentials(
                authenticator,
                config,
                actor_email,
                password,
                timeout=get_settings().ldap_check_timeout_seconds,
            )
        except DirectoryAuthenticationError as exc:
            msg = f"Failed to validate new LDAP settings with provided current user password. {exc}"
            raise ExternalDependencyError(msg, show_to_user=True) from exc

        await record_changes(
            repository,
            company_id=company.id,
            by_user_id=actor_id,
            entity_type=AuditEntityType.COMPANY,
            entity_id=company.id,
            old_state=old_state,
            new_state={"ldap_auth_enabled": enabled},
        )
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to update LDAP configuration by user %s", actor_id)
        await repository.rollback()
        outcome.flash_error(f"Failed to update LDAP configuration. {extract_user_error_message(exc)}")
        return outcome

    outcome.flash_message("LDAP configuration was updated")
    return outcome


# ---------------------------------------------------------------------------
# Backup and removal
# ---------------------------------------------------------------------------


BACKUP_COLUMNS = (
    "Lastname",
    "Name",
    "Email address",
    "Type of absence",
    "Status",
    "Started at",
    "Day part start",
    "Ended at",
    "Day part end",
    "Comment",
)


@dataclass(frozen=True)
class CompanyBackup:
    filename: str
    content: str


async def _company_summary_csv(repository: PolicyRepository, company: Company) -> str:
    users = await repository.find_all(User, {"company_id": company.id}, order_by=("lastname", "name"))
    leave_types = {lt.id: lt.name for lt in await repository.find_all(LeaveType, {"company_id": company.id})}
    leaves = await repository.find_all(Leave, {"user_id": [user.id for user in users]}, order_by=("date_start",))

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(BACKUP_COLUMNS)
    for user in users:
        for leave in (leave for leave in leaves if leave.user_id == user.id):
            writer.writerow(
                [
                    user.lastname,
                    user.name,
                    user.email,
                    leave_types.get(leave.leave_type_id, ""),
                    leave.status,
                    leave.date_start.isoformat(),
                    leave.day_part_start,
                    leave.date_end.isoformat(),
                    leave.day_part_end,
                    leave.employee_comment or "",
                ]
            )
    return buffer.getvalue()


async def export_company_backup(repository: PolicyRepository, actor: User) -> CompanyBackup | SettingsOutcome:
    """CSV summary of every absence in the company, or the rejection outcome."""
    try:
        company = await _load_company(repository, actor.company_id)
        content = await _company_summary_csv(repository, company)
        return CompanyBackup(filename=f"{company.name_for_machine()}_backup.csv", content=content)
    except Exception as exc:
        logger.exception("Failed to download company summary")
        outcome = SettingsOutcome().redirect(GENERAL_SETTINGS_PATH)
        outcome.flash_error(f"Failed to download company summary. {extract_user_error_message(exc)}")
        return outcome


async def _remove_company_data(repository: PolicyRepository, company: Company) -> None:
    users = await repository.find_all(User, {"company_id": company.id})
    user_ids = [user.id for user in users]

    dependants: list[Any] = [*await repository.find_all(AuditRecord, {"company_id": company.id})]
    for kind in (UserFeed, UserAllowanceAdjustment, Leave, Schedule):
        dependants.extend(await repository.find_all(kind, {"user_id": user_ids}))
    dependants.extend(await repository.find_all(Schedule, {"company_id": company.id}))
    for entity in dependants:
        await repository.destroy(entity)
    await repository.flush()

    for user in users:
        await repository.destroy(user)
    await repository.flush()

    await repository.destroy(company)


async def remove_company(repository: PolicyRepository, actor: User, form: CompanyRemovalForm) -> SettingsOutcome:
    """Delete the company with all of its data, once its name is confirmed."""
    outcome = SettingsOutcome()
    actor_id = actor.id

    try:
        company = await _load_company(repository, actor.company_id, ("bank_holidays", "leave_types"))
        company_name = company.name
        if trim(form.confirm_name) != company_name:
            msg = "Provided name confirmation does not correspond to current company"
            raise DomainConflictError(
                msg,
                system_message=f"User {actor_id} provided wrong confirmation name for company {company.id}",
            )
        await _remove_company_data(repository, company)
        await repository.commit()
    except Exception as exc:
        logger.exception("Failed to remove company by user %s: %s", actor_id, extract_system_error_message(exc))
        await repository.rollback()
        outcome.flash_error(f"Failed to remove company. Reason: {extract_user_error_message(exc)}")
        return outcome.redirect(GENERAL_SETTINGS_PATH)

    outcome.flash_message(f"Company {company_name} and related data were successfully removed")
    return outcome.redirect(HOME_PATH)
