"""HTTP routes for the presentation surface."""
