# obra/schemas/dto/base_dto.py
from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    @classmethod  # every DTO spells out its own mapping
    def from_orm_model(cls, orm_obj):
        """
        Subclasses override.
        """
        raise NotImplementedError(
            f"{cls.__name__}.from_orm_model() must be implemented"
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json")
