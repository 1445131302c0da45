"""Transactional installer for the autopilot skills/agents/commands/hooks template."""

__version__ = "1.0.0"
