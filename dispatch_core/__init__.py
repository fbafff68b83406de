"""Core (UI-agnostic) dispatch dashboard logic.

This package contains:
- data fetching (Firebase REST -> raw collections)
- record processing (raw -> normalized dataclasses)
- classification, filter selection and free-text search
- the load/refresh session and page payloads (JSON-serializable)
"""
