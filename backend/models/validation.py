"""Uniform result type for every validation step."""
from pydantic import BaseModel, computed_field


class ValidationResult(BaseModel):
    errors: list[str] = []
    warnings: list[str] = []

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors
