"""
Agent Studio Application Package

This package contains the core application modules including:
- registry: Tool, peer agent and callback registries plus the metadata store
- services: MCP and A2A probe clients
- generator: Agent project generation and packaging
- api: FastAPI application and routes
- worker: Background health polling (Celery and in-process monitor)
- tests: Test suites
"""
