"""Local persistence for the client."""
