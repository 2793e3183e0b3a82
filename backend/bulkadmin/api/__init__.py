"""HTTP routers for the session and auth endpoints."""
