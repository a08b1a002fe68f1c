"""Loader configuration and ranked instance records.

Usage:
    config = LoaderConfig.model_validate({
        "my/default-palette": {"typeId": "my/palette", "ranking": 10},
        "my/dark-palette": {"type_id": "my/palette"},
    })
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel


class InstanceConfig(BaseModel):
    """Configuration of one known instance.

    Attributes:
        type_id: Id of the type the instance is registered for. When omitted,
            the declaration in the loader's instance info is used.
        ranking: Priority among instances of the same type. Higher wins.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    type_id: str | None = Field(default=None, validation_alias=AliasChoices("type_id", "typeId"))
    ranking: float = 0


class LoaderConfig(RootModel[dict[str, InstanceConfig]]):
    """Known instances by instance id."""

    root: dict[str, InstanceConfig] = Field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class InstanceInfo:
    """A registered instance, ranked among the instances of its type.

    Attributes:
        id: Instance (module) id.
        type_id: Id of the type it is registered for.
        ranking: Priority. Higher wins.
        index: Registration order. Lower wins on ties.
    """

    id: str
    type_id: str
    ranking: float
    index: int

    @property
    def sort_key(self) -> tuple[float, int]:
        return (-self.ranking, self.index)
