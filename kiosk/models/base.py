from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Reservation-service entity: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data):
        # a null declared field counts as absent, so its default applies; extras keep their nulls
        if not isinstance(data, dict):
            return data
        declared = set()
        for name, info in cls.model_fields.items():
            declared.add(name)
            if info.alias:
                declared.add(info.alias)
        return {key: value for key, value in data.items() if value is not None or key not in declared}

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
