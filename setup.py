#!/usr/bin/env python
"""Setup configuration for the patent intake server."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="patent-intake-server",
    version="0.1.0",
    author="Patent Intake Team",
    description="Flask service for patent-intake invitations and work tracker reminders",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "migrations", "migrations.*"]),
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0",
        "Flask-SQLAlchemy>=3.1",
        "Flask-Cors>=4.0",
        "Flask-Limiter>=3.5",
        "SQLAlchemy>=2.0",
        "alembic>=1.12",
        "psycopg2-binary>=2.9",
        "pydantic[email]>=2.5",
        "pydantic-settings>=2.1",
        "python-json-logger>=2.0",
        "PyJWT>=2.8",
        "bcrypt>=4.0",
        "Werkzeug>=3.0",
        "google-cloud-storage>=2.10",
        "APScheduler>=3.10,<4",
        "tzdata",
        "gunicorn>=21.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-cov>=4.1",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Framework :: Flask",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
