"""Configuration: sparse TOML sections, env overrides, and logging setup."""
