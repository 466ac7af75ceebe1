"""Workbook auto-generation glue for the data-onboarding platform.

Reacts to ``file:created`` / ``job:ready`` events, infers a blueprint from the
uploaded file's first sheet and materializes it as a new workbook.
"""

__version__ = "0.1.0"
