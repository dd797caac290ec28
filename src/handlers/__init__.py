"""Lambda entry points, thin wrappers over core/."""
