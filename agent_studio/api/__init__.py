"""HTTP API for the agent studio."""
