# /classroom-ai-backend/app/models/base_model.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every persisted record. Python code uses snake_case attributes,
    the stored blobs and the API use camelCase (`teacherName`, `createdAt`, ...).
    Both spellings are accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        protected_namespaces=(),  # allows the `model_id` field
    )

    def to_record(self) -> dict:
        """The dictionary shape written to the store: camelCase, absent optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
