"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (settings,
logging, error mapping, DB wiring). Keep feature-specific SQL and business
logic in the feature package (e.g. `people/`).
"""
