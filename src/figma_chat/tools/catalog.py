"""Static catalog of the Figma MCP tools exposed to the model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..mcp.client import require_fields

NODE_ID_PATTERN = r"^$|^(?:-?\d+[:-]-?\d+)$"

_NODE_ID = {
    "type": "string",
    "pattern": NODE_ID_PATTERN,
    "description": (
        'The ID of the node in the Figma document, eg. "123:456" or "123-456". '
        "This should be a valid node ID in the Figma document."
    ),
}
_FILE_KEY = {
    "type": "string",
    "description": (
        "The key of the Figma file to use. If the URL is provided, extract the file key from the URL. "
        "The given URL must be in the format https://figma.com/design/:fileKey/:fileName?node-id=:int1-:int2. "
        "The extracted fileKey would be `:fileKey`."
    ),
}
_CLIENT_LANGUAGES = {
    "type": "string",
    "description": (
        "A comma separated list of programming languages used by the client in the current context in "
        "string form, e.g. `javascript`, `html,css,typescript`, etc. If you do not know, please list "
        "`unknown`. This is used for logging purposes to understand which languages are being used. "
        "If you are unsure, it is better to list `unknown` than to make a guess."
    ),
}
_CLIENT_FRAMEWORKS = {
    "type": "string",
    "description": (
        "A comma separated list of frameworks used by the client in the current context, e.g. `react`, "
        "`vue`, `django` etc. If you do not know, please list `unknown`. This is used for logging "
        "purposes to understand which frameworks are being used. If you are unsure, it is better to "
        "list `unknown` than to make a guess"
    ),
}
_URL_HINT = (
    "If the URL is of the format https://figma.com/design/:fileKey/branch/:branchKey/:fileName "
    "then use the branchKey as the fileKey."
)


def _object_schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


@dataclass(frozen=True)
class ToolDescriptor:
    """One catalog entry: name, description and JSON-Schema parameter contract."""

    name: str
    description: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(self.parameters.get("required", ()))

    def validate(self, arguments: Mapping[str, Any]) -> None:
        require_fields(self.name, arguments, self.required)

    def as_openai_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": dict(self.parameters),
            },
        }


FIGMA_TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="get_screenshot",
        description=(
            "Generate a screenshot for a given node or the currently selected node in the Figma desktop app. "
            "Use the nodeId parameter to specify a node id. nodeId parameter is REQUIRED. Use the fileKey "
            "parameter to specify the file key. fileKey parameter is REQUIRED. If a URL is provided, extract "
            "the file key and node id from the URL. For example, if given the URL "
            "https://figma.com/design/pqrs/ExampleFile?node-id=1-2 the extracted fileKey would be `pqrs` and "
            f"the extracted nodeId would be `1:2`. {_URL_HINT}"
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="create_design_system_rules",
        description="Provides a prompt to generate design system rules for this repo.",
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
            },
            [],
        ),
    ),
    ToolDescriptor(
        name="get_design_context",
        description=(
            "Generate UI code for a given node in Figma. Use the nodeId parameter to specify a node id. Use the "
            "fileKey parameter to specify the file key. If a URL is provided, extract the node id from the URL, "
            "for example, if given the URL https://figma.com/design/:fileKey/:fileName?node-id=1-2, the "
            f"extracted nodeId would be `1:2` and the fileKey would be `:fileKey`. {_URL_HINT} The response "
            "will contain a code string and a JSON of download URLs for the assets referenced in the code."
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
                "forceCode": {
                    "type": "boolean",
                    "description": (
                        "Whether code should always be returned, instead of returning just metadata if the "
                        "output size is too large. Only set this when the user directly requests to force the code."
                    ),
                },
                "disableCodeConnect": {
                    "type": "boolean",
                    "description": (
                        "Whether Code Connect should be used to get the design context. Only set this when the "
                        "user directly requests to disable Code Connect."
                    ),
                },
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="get_metadata",
        description=(
            "IMPORTANT: Always prefer to use get_design_context tool. Get metadata for a node or page in the "
            "Figma desktop app in XML format. Useful only for getting an overview of the structure, it only "
            "includes node IDs, layer types, names, positions and sizes. You can call get_design_context on the "
            "node IDs contained in this response. Use the nodeId parameter to specify a node id, it can also be "
            "the page id (e.g. 0:1). Extract the node id from the URL, for example, if given the URL "
            "https://figma.com/design/:fileKey/:fileName?node-id=1-2, the extracted nodeId would be `1:2`. "
            f"{_URL_HINT}"
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="get_variable_defs",
        description=(
            "Get variable definitions for a given node id. E.g. {'icon/default/secondary': #949494}Variables "
            "are reusable values that can be applied to all kinds of design properties, such as fonts, colors, "
            "sizes and spacings. Use the nodeId parameter to specify a node id. Extract the node id from the "
            "URL, for example, if given the URL https://figma.com/design/:fileKey/:fileName?node-id=1-2, the "
            f"extracted nodeId would be `1:2`. {_URL_HINT}"
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="get_figjam",
        description=(
            "Generate UI code for a given FigJam node in Figma. Use the nodeId parameter to specify a node id. "
            "Use the fileKey parameter to specify the file key. If a URL is provided, extract the node id from "
            "the URL, for example, if given the URL https://figma.com/board/:fileKey/:fileName?node-id=1-2, the "
            "extracted nodeId would be `1:2` and the fileKey would be `:fileKey`. IMPORTANT: This tool only "
            "works for FigJam files, not other Figma files."
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "clientLanguages": _CLIENT_LANGUAGES,
                "clientFrameworks": _CLIENT_FRAMEWORKS,
                "includeImagesOfNodes": {
                    "type": "boolean",
                    "description": "Whether to include images of nodes in the response",
                },
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="get_code_connect_map",
        description=(
            "Get a mapping of {[nodeId]: {codeConnectSrc: e.g. location of component in codebase, "
            "codeConnectName: e.g. name of component in codebase} E.g. {'1:2': { codeConnectSrc: "
            "'https://github.com/foo/components/Button.tsx', codeConnectName: 'Button' } }. Use the nodeId "
            "parameter to specify a node id. Use the fileKey parameter to specify the file key.If a URL is "
            "provided, extract the node id from the URL, for example, if given the URL "
            "https://figma.com/design/:fileKey/:fileName?node-id=1-2, the extracted nodeId would be `1:2` and "
            "the fileKey would be `:fileKey`."
        ),
        parameters=_object_schema(
            {
                "nodeId": _NODE_ID,
                "fileKey": _FILE_KEY,
                "codeConnectLabel": {
                    "type": "string",
                    "description": (
                        "The label used to fetch Code Connect information for a particular language or "
                        "framework when multiple Code Connect mappings exist."
                    ),
                },
            },
            ["nodeId", "fileKey"],
        ),
    ),
    ToolDescriptor(
        name="whoami",
        description=(
            "Returns information about the authenticated user. If you are experiencing permission issues with "
            "other tools, you can use this tool to get information about who is authenticated and validate the "
            "right user is logged in."
        ),
        parameters=_object_schema({}, []),
    ),
)

TOOLS_BY_NAME: Mapping[str, ToolDescriptor] = MappingProxyType({tool.name: tool for tool in FIGMA_TOOLS})
