"""Task runtime domain models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(StrEnum):
    """Task (and rule) activation status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class TaskRunSnapshot(BaseModel):
    """Run status of the task backing a notification rule.

    Owned by the task runtime and fetched live for every response.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    status: TaskStatus = TaskStatus.ACTIVE
    latest_completed: datetime | None = Field(default=None, alias="latestCompleted")
    latest_scheduled: datetime | None = Field(default=None, alias="latestScheduled")
    last_run_status: str | None = Field(default=None, alias="lastRunStatus")
    last_run_error: str | None = Field(default=None, alias="lastRunError")


class TaskCreate(BaseModel):
    """Request to create the task backing a rule."""

    model_config = ConfigDict(populate_by_name=True)

    org_id: str = Field(alias="orgID")
    owner_id: str = Field(alias="ownerID")
    flux: str
    status: TaskStatus = TaskStatus.ACTIVE
    description: str | None = None


class TaskUpdate(BaseModel):
    """Changeset for the task backing a rule."""

    model_config = ConfigDict(populate_by_name=True)

    flux: str | None = None
    status: TaskStatus | None = None
    description: str | None = None
