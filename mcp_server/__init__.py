"""MCP server over generated Salesforce object reference data."""
