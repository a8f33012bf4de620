"""Configuration module for mcbin."""
