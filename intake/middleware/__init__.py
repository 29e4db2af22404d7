"""Custom middleware package."""
