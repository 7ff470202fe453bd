"""MCP tool schema to Gemini function declaration translation.

MCP servers describe tool inputs with JSON Schema. Gemini's function calling
API expects its own ``Schema`` type with an upper-case type enumeration. Only
the subset Gemini understands is carried over: type, description, object
properties/required and array items.
"""

from typing import Any

from google.genai import types

from healthagent.domain.chat.types import ToolDescriptor

_GEMINI_TYPES: dict[str, types.Type] = {
    "string": types.Type.STRING,
    "number": types.Type.NUMBER,
    "integer": types.Type.INTEGER,
    "boolean": types.Type.BOOLEAN,
    "array": types.Type.ARRAY,
}


def to_gemini_type(json_type: Any) -> types.Type:
    """Map a JSON Schema type to Gemini's type enumeration.

    Anything that is not one of the known primitives (including ``object``,
    a missing type or a union list) becomes OBJECT.
    """
    if not isinstance(json_type, str):
        return types.Type.OBJECT
    return _GEMINI_TYPES.get(json_type, types.Type.OBJECT)


def to_gemini_schema(node: dict[str, Any]) -> types.Schema:
    """Translate one JSON Schema node, recursing into properties and items."""
    schema_type = to_gemini_type(node.get("type"))
    fields: dict[str, Any] = {"type": schema_type}

    description = node.get("description")
    if description:
        fields["description"] = description

    if schema_type == types.Type.OBJECT:
        properties = node.get("properties")
        if properties:
            fields["properties"] = {
                name: to_gemini_schema(child) for name, child in properties.items()
            }
            required = node.get("required")
            if required:
                fields["required"] = list(required)
    elif schema_type == types.Type.ARRAY:
        items = node.get("items")
        if isinstance(items, dict):
            fields["items"] = to_gemini_schema(items)

    return types.Schema(**fields)


def translate_tool(tool: ToolDescriptor) -> types.FunctionDeclaration:
    """Convert an MCP tool into a Gemini function declaration.

    Tools without declared properties get no ``parameters`` at all, so the
    model treats them as argument-less.
    """
    fields: dict[str, Any] = {
        "name": tool.name,
        "description": tool.description or "",
    }
    input_schema = tool.input_schema or {}
    if input_schema.get("properties"):
        fields["parameters"] = to_gemini_schema(input_schema)
    return types.FunctionDeclaration(**fields)


def translate_tools(tools: list[ToolDescriptor]) -> list[types.FunctionDeclaration]:
    return [translate_tool(tool) for tool in tools]
