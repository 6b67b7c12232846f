"""
Seed catalog of caterers and event requests.

Responsibilities:
- Locate the bundled CSV files (or caller-supplied replacements).
- Parse list and numeric columns and convert rows into domain models.
"""
