"""Prompt registry: definitions, pluggable message builders, and argument completion.

Prompt bodies are deployment-specific: each definition is paired with a
builder keyed by prompt name. :class:`TemplatePromptBuilder` renders
``string.Template`` messages declared in the gateway YAML; code can
register any callable with the same signature.
"""

from __future__ import annotations

from collections.abc import Callable
from string import Template
from typing import Any, Literal

from pydantic import BaseModel

from mcpgw.errors import InvalidParamsError

# MCP caps completion/complete results at 100 values.
MAX_COMPLETION_VALUES = 100


class PromptArgument(BaseModel):
    """One declared prompt argument.

    ``values`` lists candidate values offered by ``completion/complete``.
    """

    name: str
    description: str = ""
    required: bool = False
    values: list[str] = []

    def to_mcp(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "required": self.required}


class PromptDefinition(BaseModel):
    """A prompt exposed by ``prompts/list``."""

    name: str
    description: str = ""
    arguments: list[PromptArgument] = []

    def to_mcp(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [arg.to_mcp() for arg in self.arguments],
        }

    def argument(self, name: str) -> PromptArgument | None:
        return next((arg for arg in self.arguments if arg.name == name), None)


class PromptMessage(BaseModel):
    """A rendered prompt message."""

    role: Literal["user", "assistant"]
    text: str

    def to_mcp(self) -> dict[str, Any]:
        return {"role": self.role, "content": {"type": "text", "text": self.text}}


PromptBuilder = Callable[[dict[str, str]], list[PromptMessage]]


class PromptMessageTemplate(BaseModel):
    """A message template using ``$name`` / ``${name}`` placeholders."""

    role: Literal["user", "assistant"] = "user"
    content: str


class TemplatePromptBuilder:
    """Renders message templates with :class:`string.Template`.

    Unknown placeholders are left as-is (``safe_substitute``).
    """

    def __init__(self, messages: list[PromptMessageTemplate]) -> None:
        self._messages = messages

    def __call__(self, arguments: dict[str, str]) -> list[PromptMessage]:
        return [
            PromptMessage(role=msg.role, text=Template(msg.content).safe_substitute(arguments))
            for msg in self._messages
        ]


class PromptRegistry:
    """Name-to-prompt table with builder dispatch."""

    def __init__(self) -> None:
        self._prompts: dict[str, tuple[PromptDefinition, PromptBuilder]] = {}

    def register(self, definition: PromptDefinition, builder: PromptBuilder) -> None:
        if definition.name in self._prompts:
            msg = f"Prompt already registered: {definition.name}"
            raise ValueError(msg)
        self._prompts[definition.name] = (definition, builder)

    def definitions(self) -> list[PromptDefinition]:
        return [definition for definition, _ in self._prompts.values()]

    def get_definition(self, name: str) -> PromptDefinition:
        entry = self._prompts.get(name)
        if entry is None:
            raise InvalidParamsError(f"Unknown prompt: {name}", data={"prompt": name})
        return entry[0]

    def render(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the ``prompts/get`` result for *name*.

        Raises:
            InvalidParamsError: Unknown prompt or missing required arguments.
        """
        definition = self.get_definition(name)
        args = {key: str(value) for key, value in (arguments or {}).items()}
        missing = [a.name for a in definition.arguments if a.required and a.name not in args]
        if missing:
            raise InvalidParamsError(
                f"Missing required arguments for prompt {name}: {', '.join(missing)}",
                data={"prompt": name, "missing": missing},
            )
        builder = self._prompts[name][1]
        messages = builder(args)
        return {
            "description": definition.description,
            "messages": [message.to_mcp() for message in messages],
        }

    def complete(self, name: str, argument: str, value: str) -> dict[str, Any]:
        """Return candidate values for a partially typed prompt argument.

        Matching is a case-insensitive prefix match against the argument's
        declared ``values``.
        """
        definition = self.get_definition(name)
        arg = definition.argument(argument)
        if arg is None:
            raise InvalidParamsError(
                f"Prompt {name} has no argument {argument}",
                data={"prompt": name, "argument": argument},
            )
        prefix = value.lower()
        matches = [v for v in arg.values if v.lower().startswith(prefix)]
        return {
            "values": matches[:MAX_COMPLETION_VALUES],
            "total": len(matches),
            "hasMore": len(matches) > MAX_COMPLETION_VALUES,
        }
