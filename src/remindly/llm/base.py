from abc import ABC, abstractmethod
from typing import Any, Dict

__all__ = ["LLMClient", "JSONSchema"]

JSONSchema = Dict[str, Any]


class LLMClient(ABC):
    @abstractmethod
    async def generate_json(self, prompt: str, schema: JSONSchema) -> str:
        """Return the model output as raw JSON text constrained to `schema`.

        Transport and service errors are raised as-is; parsing and validation
        are the caller's job.
        """
