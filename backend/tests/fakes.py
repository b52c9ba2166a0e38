"""
Test doubles shared by the unit tests.

FakeBackend replays scripted responses so pipeline tests never reach a
real provider.
"""

import json
from typing import Optional, Union

from content_processor.services.llm.base import (
    BackendConfig,
    BackendOptions,
    LLMBackend,
)


class FakeBackend(LLMBackend):
    """
    Scripted backend.

    Each call pops the next queued item: a string is returned as the
    response, an exception instance is raised. Prompts and options are
    recorded for assertions.
    """

    name = "fake"

    def __init__(self, responses: Optional[list[Union[str, Exception]]] = None):
        super().__init__()
        self.responses: list[Union[str, Exception]] = list(responses or [])
        self.prompts: list[str] = []
        self.options: list[BackendOptions] = []
        self._initialized = True

    def queue(self, *items: Union[str, Exception]) -> "FakeBackend":
        self.responses.extend(items)
        return self

    async def initialize(self, config: BackendConfig) -> bool:
        self._initialized = True
        return True

    async def _send(self, prompt: str, options: BackendOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)
        if not self.responses:
            raise AssertionError("FakeBackend has no scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def calls(self) -> int:
        return len(self.prompts)


def extraction_response(
    titles: tuple[str, ...] = ("Hooks",), suggested_end_line: int = -1
) -> str:
    """A well-formed theory-extraction response."""
    return json.dumps(
        {
            "logicalBlockInfo": {"suggestedEndLine": suggested_end_line},
            "theory": [
                {
                    "id": f"theory_{i}",
                    "title": title,
                    "content": f"{title} explained in enough detail to pass validation checks.",
                    "examples": [
                        {"id": f"ex_{i}", "title": "Usage", "code": "const x = 1;"}
                    ],
                    "technology": "React",
                }
                for i, title in enumerate(titles)
            ],
            "questions": [],
            "tasks": [],
        }
    )

