"""Version information for the Kobas Python SDK"""

__version__ = "0.1.0"
