"""Movement sheet loaders."""
