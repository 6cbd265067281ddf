"""Shared base for gateway API response models."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def api_field(*names: str, **kwargs):
    """Field accepting any of the key spellings the API uses for it.

    The gateway mixes camelCase and snake_case keys between endpoints, so
    every field lists the spellings it has been seen under.
    """
    return Field(validation_alias=AliasChoices(*names), **kwargs)


class ApiModel(BaseModel):
    """Base model for API payloads: unknown keys are dropped."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )
