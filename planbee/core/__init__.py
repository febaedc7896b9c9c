"""Configuration, logging, hashing and token helpers."""
