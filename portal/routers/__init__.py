"""FastAPI routers for the guest portal."""
