"""Test fixtures for the shared planner.

- schedules: factories for raw (wire format) and normalized schedule states
- store: repository and store fixtures over a temporary data directory
- api: TestClient wired to a fresh store
"""
