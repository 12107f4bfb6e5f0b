"""Shared pydantic models — the config records and the GitLab entities the client returns."""

from pydantic import BaseModel, ConfigDict, NonNegativeInt, SecretStr


class RawConfig(BaseModel):
    """Config record as persisted on disk. Any field may be missing."""

    model_config = ConfigDict(extra="ignore")

    gl_instance: str | None = None  # hostname, e.g. gitlab.example.com
    gl_token: SecretStr | None = None
    project: NonNegativeInt | None = None
    issue: NonNegativeInt | None = None  # project-scoped iid


class CompleteConfig(BaseModel):
    """Every field present. Only ever derived from a RawConfig, never stored."""

    model_config = ConfigDict(frozen=True)

    gl_instance: str
    gl_token: SecretStr
    project: NonNegativeInt
    issue: NonNegativeInt


class Project(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int  # instance-wide id
    iid: int | None = None  # number shown in the project, used in API paths
    title: str
    state: str | None = None


class Note(BaseModel):
    """Returned by create_note — just enough to confirm what was posted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    body: str
