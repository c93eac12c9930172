"""HTTP layer: FastAPI routers, dependencies and middleware."""
