"""Feature modules: resolution, directory and membership."""
