"""Configuration loading and the security settings snapshot."""
