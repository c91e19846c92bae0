"""
Test helpers package

Provides reusable helpers for:
- Test data factories (factories.py)
- In-memory forking collaborators (fakes.py)
"""
