"""Route handlers for the HTTP server."""
