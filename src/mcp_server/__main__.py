from src.mcp_server.server import run

run()
