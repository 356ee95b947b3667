"""Default directory for per-profile local storage files."""
