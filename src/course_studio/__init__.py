"""course-studio — authenticated request and upload core for course authoring."""

__version__ = "0.1.0"
