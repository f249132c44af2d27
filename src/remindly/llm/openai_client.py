from openai import AsyncOpenAI

from remindly.config.settings import OPENAI_API_KEY, OPENAI_BASE_URL, LLM_MODEL
from remindly.llm.base import JSONSchema, LLMClient
from remindly.logger import logger


class OpenAIClient(LLMClient):
    def __init__(
        self,
        api_key: str | None = OPENAI_API_KEY,
        base_url: str = OPENAI_BASE_URL,
        model: str = LLM_MODEL,
        schema_name: str = "appointment",
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.schema_name = schema_name
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url
        )

    async def generate_json(self, prompt: str, schema: JSONSchema) -> str:
        # Structured outputs docs: https://platform.openai.com/docs/guides/structured-outputs
        logger.trace(f"LLM request BaseUrl:{self.base_url}; Model:{self.model}; Prompt:{prompt}")
        response = await self.client.responses.create(
            model=self.model,
            input=prompt,
            text={
                "format": {
                    "type": "json_schema",
                    "name": self.schema_name,
                    "schema": schema,
                    "strict": True,
                }
            },
        )
        logger.trace(f"LLM response: {response}")
        return (response.output_text or "").strip()
