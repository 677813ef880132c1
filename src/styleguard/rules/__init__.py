"""Rule catalog: one checkable convention per rule."""
