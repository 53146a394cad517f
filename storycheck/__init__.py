"""storycheck - validate story documents against a quality checklist."""

__version__ = "0.1.0"
