"""Core application components: configuration and exceptions."""
