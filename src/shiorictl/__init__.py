"""Client for self-hosted Shiori bookmark servers."""
