"""Configuration, transport, authorization and errors."""
