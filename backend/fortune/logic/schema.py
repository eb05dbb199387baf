"""Shared pydantic base for models persisted in the camelCase layout."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire and in storage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump to the JSON-compatible camelCase layout."""
        return self.model_dump(mode="json", by_alias=True)
