from __future__ import annotations

from pydantic import BaseModel, Field


class SettingsOutcome(BaseModel):
    """Result of one settings request: flashed errors, messages and where to go next.

    Created per request and passed through the pipeline in place of a
    session-attached flash store.
    """

    errors: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)
    redirect_to: str | None = None

    def flash_error(self, message: str) -> None:
        self.errors.append(message)

    def flash_message(self, message: str) -> None:
        self.messages.append(message)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def redirect(self, path: str) -> SettingsOutcome:
        self.redirect_to = path
        return self
