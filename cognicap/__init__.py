"""CogniCap — terminology drift and cognitive load measurement for agents."""

__version__ = "0.1.0"
