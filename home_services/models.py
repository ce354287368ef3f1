from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ServiceRecord(BaseModel):
    """A single linked service, as described by one descriptor file."""

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    # Older descriptors call this field `desc`.
    description: str = Field(
        min_length=1, validation_alias=AliasChoices("description", "desc")
    )


class Registry(BaseModel):
    """The services parsed from the configuration directory for one page load.

    Order is the order the directory was enumerated in. Duplicates are kept.
    """

    services: list[ServiceRecord] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.services)


@dataclass(frozen=True)
class ChangeNotification:
    """The configuration directory may have changed; go and look."""


CHANGED = ChangeNotification()


@dataclass(frozen=True)
class ParseFailure:
    """A descriptor that could not be turned into a `ServiceRecord`."""

    source: str
    cause: str

    def __str__(self) -> str:
        return f"`{self.source}`: {self.cause}"
