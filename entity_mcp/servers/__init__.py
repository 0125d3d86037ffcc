"""Tool servers shipped with entity_mcp."""
