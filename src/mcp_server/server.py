"""MCP server exposing trip evidence ingestion and search tools."""

import asyncio
import json
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from src.errors import EvidenceError, ValidationError
from src.models.enums import Intent, SourceType
from src.service import EvidenceService, build_service

logger = logging.getLogger(__name__)

server = Server("trip-evidence")
_service: EvidenceService | None = None

MAX_LIMIT = 50
MAX_QUERY_LENGTH = 1000

_SOURCE_TYPES = [s.value for s in SourceType]


def _get_service() -> EvidenceService:
    global _service
    if _service is None:
        _service = build_service()
    return _service


def set_service(service: EvidenceService | None) -> None:
    """Install the service the tool handlers use (None resets to lazy build)."""
    global _service
    _service = service


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="search_evidence",
            description="Search a trip's stored evidence by semantic similarity.",
            inputSchema={
                "type": "object",
                "properties": {
                    "trip_id": {"type": "string", "description": "Trip identifier"},
                    "query": {"type": "string", "description": "Natural language search query"},
                    "limit": {"type": "integer", "default": 8, "description": f"Number of results (max {MAX_LIMIT})"},
                    "num_candidates": {"type": "integer", "default": 200, "description": "Candidate pool size"},
                    "source_types": {
                        "type": "array",
                        "items": {"type": "string", "enum": _SOURCE_TYPES},
                        "description": "Restrict results to these categories",
                    },
                },
                "required": ["trip_id", "query"],
            },
        ),
        Tool(
            name="ingest_evidence",
            description="Store scraped flight, lodging or web records for a trip.",
            inputSchema={
                "type": "object",
                "properties": {
                    "trip_id": {"type": "string", "description": "Trip identifier"},
                    "source_type": {"type": "string", "enum": _SOURCE_TYPES},
                    "records": {"type": "array", "items": {"type": "object"}},
                },
                "required": ["trip_id", "source_type", "records"],
            },
        ),
        Tool(
            name="evidence_action",
            description="Apply a planner intent: retrieve, refresh evidence, or both.",
            inputSchema={
                "type": "object",
                "properties": {
                    "intent": {"type": "string", "enum": [i.value for i in Intent]},
                    "trip_id": {"type": "string"},
                    "source_type": {"type": "string", "enum": _SOURCE_TYPES},
                    "data": {"type": "array", "items": {"type": "object"}},
                    "query": {"type": "string"},
                    "limit": {"type": "integer", "default": 5},
                },
                "required": ["intent", "trip_id", "source_type"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    handlers = {
        "search_evidence": _handle_search_evidence,
        "ingest_evidence": _handle_ingest_evidence,
        "evidence_action": _handle_evidence_action,
    }
    handler = handlers.get(name)
    if handler is None:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    try:
        payload = await asyncio.to_thread(handler, arguments)
    except ValidationError as e:
        payload = {"error": "invalid_request", "message": e.message}
    except EvidenceError as e:
        logger.error("Tool %s failed: %s", name, e)
        payload = {"error": type(e).__name__, "message": e.message}
    return [TextContent(type="text", text=json.dumps(payload))]


def _limit(arguments: dict, default: int | None = None) -> int | None:
    """Read ``limit``, leaving range checks below the cap to the retriever."""
    limit = arguments.get("limit")
    if limit is None:
        return default
    if not isinstance(limit, int):
        raise ValidationError("limit must be an integer", details={"limit": limit})
    if limit > MAX_LIMIT:
        raise ValidationError(f"limit must be <= {MAX_LIMIT}", details={"limit": limit})
    return limit


def _handle_search_evidence(arguments: dict):
    query = arguments.get("query", "")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError("query too long")

    return _get_service().retrieve(
        arguments.get("trip_id", ""),
        query,
        limit=_limit(arguments),
        num_candidates=arguments.get("num_candidates"),
        source_types=arguments.get("source_types"),
    )


def _handle_ingest_evidence(arguments: dict) -> dict:
    result = _get_service().ingest(
        arguments.get("trip_id", ""),
        arguments.get("source_type", ""),
        arguments.get("records"),
    )
    return result.as_dict()


def _handle_evidence_action(arguments: dict) -> dict:
    return _get_service().handle_action(
        intent=arguments.get("intent", ""),
        trip_id=arguments.get("trip_id", ""),
        source_type=arguments.get("source_type", ""),
        data=arguments.get("data"),
        query=arguments.get("query"),
        limit=_limit(arguments, default=5),
    )


async def main():
    async with stdio_server() as (read, write):
        await server.run(read, write, server.create_initialization_options())


def run():
    """Console entry point for the stdio MCP server."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
