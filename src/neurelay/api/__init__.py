"""HTTP and WebSocket front end for the relay."""
