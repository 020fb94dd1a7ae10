"""tools package: operator CLI entry points."""
