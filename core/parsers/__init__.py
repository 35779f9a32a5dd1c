"""Cascade stages for the local classifier.

Stage modules are imported explicitly by ``core.local_nlp`` so the pattern
library can depend on ``core.parsers.types`` without import cycles.
"""
