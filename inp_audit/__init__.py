"""Static INP (Interaction to Next Paint) auditor for front-end sources."""

__version__ = "0.1.0"
