"""Makes the `src` package importable when running pytest from the project root."""
