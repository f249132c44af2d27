import asyncio
from typing import Any, Dict, List

from google import genai
from google.genai import types

from remindly.config.settings import GEMINI_API_KEY, GEMINI_BASE_URL, LLM_MODEL
from remindly.llm.base import JSONSchema, LLMClient
from remindly.logger import logger

__all__ = ["GeminiClient", "to_gemini_schema"]

_TYPE_MAP = {
    "object": types.Type.OBJECT,
    "string": types.Type.STRING,
    "integer": types.Type.INTEGER,
    "number": types.Type.NUMBER,
    "boolean": types.Type.BOOLEAN,
    "array": types.Type.ARRAY,
}


def to_gemini_schema(schema: JSONSchema) -> types.Schema:
    """Translate the JSON Schema subset used here (type lists with "null") into a Gemini Schema."""
    raw_type = schema.get("type", "object")
    type_names: List[str] = raw_type if isinstance(raw_type, list) else [raw_type]
    nullable = "null" in type_names
    concrete = [t for t in type_names if t != "null"]
    if len(concrete) != 1:
        raise ValueError(f"Unsupported schema type: {raw_type}")

    kwargs: Dict[str, Any] = {"type": _TYPE_MAP[concrete[0]]}
    if nullable:
        kwargs["nullable"] = True
    if "description" in schema:
        kwargs["description"] = schema["description"]
    if "properties" in schema:
        kwargs["properties"] = {name: to_gemini_schema(sub) for name, sub in schema["properties"].items()}
        kwargs["property_ordering"] = list(schema["properties"].keys())
    if "required" in schema:
        kwargs["required"] = list(schema["required"])
    if "items" in schema:
        kwargs["items"] = to_gemini_schema(schema["items"])
    return types.Schema(**kwargs)


class GeminiClient(LLMClient):
    def __init__(self, base_url: str | None = GEMINI_BASE_URL, api_key: str | None = GEMINI_API_KEY, model: str = LLM_MODEL) -> None:
        self.model = model
        self.client = genai.Client(api_key=api_key, http_options={"base_url": base_url} if base_url else None)

    @staticmethod
    def _extract_text(response: Any) -> str:
        text = getattr(response, "text", None)
        if isinstance(text, str):
            return text

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return ""
        content = getattr(candidates[0], "content", None)
        parts = list(getattr(content, "parts", None) or [])
        return "".join(p.text for p in parts if isinstance(getattr(p, "text", None), str))

    async def generate_json(self, prompt: str, schema: JSONSchema) -> str:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=to_gemini_schema(schema),
        )
        logger.trace(f"Gemini request Model:{self.model}; Prompt:{prompt}")
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=prompt,
            config=config,
        )
        logger.trace(f"Gemini response: {response}")
        return self._extract_text(response).strip()
