"""Configuration, logging, security helpers and storage."""
