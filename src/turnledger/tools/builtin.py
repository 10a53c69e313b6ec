from __future__ import annotations

from turnledger.models import ToolDefinition


class SearchTool:
    name = "search"

    @staticmethod
    def definition() -> ToolDefinition:
        return ToolDefinition(
            name="search",
            description="Search for information by query",
            parameters={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "The search query"},
                },
                "required": ["query"],
            },
        )


TOOLS = {
    "search": SearchTool,
}
