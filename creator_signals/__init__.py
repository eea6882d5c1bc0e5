"""
Creator Signals Package.

Performance-signal and title-optimization engine for video creators.
Turns caller-supplied items (titles, view counts, creation timestamps) into
robust statistical signals and uses them to search for better titles.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, constants, exceptions and dependencies
    - models: Pydantic schemas and enums
    - services: Statistics, pattern learning and title optimization

The services layer is usable on its own as a library; the api package is a
thin HTTP surface over it.
"""

__version__ = "1.0.0"
