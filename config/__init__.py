"""Environment configuration classes."""
