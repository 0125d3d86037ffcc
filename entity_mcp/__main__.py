from entity_mcp.servers.entity_enum import cli

cli()
