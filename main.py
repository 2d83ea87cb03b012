"""MCP server entry point for vkflow."""

from vkflow.server import build_server, main

mcp = build_server()

if __name__ == "__main__":
    main()
