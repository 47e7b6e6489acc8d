"""Session, sync and remote collaborator services."""
