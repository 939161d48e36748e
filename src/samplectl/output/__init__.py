"""Output layer: Rich renderers for humans, JSON for machines."""
