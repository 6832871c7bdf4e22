"""Process-wide settings and logging setup."""
