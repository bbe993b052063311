"""AgentMind: mine tool-use observations into scored behavioral instincts."""

__version__ = "0.1.0"
