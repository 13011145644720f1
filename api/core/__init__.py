"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(settings, DB pool, Supabase client, error rendering). Keep feature-specific
queries and business logic in the corresponding feature package (e.g. `blog/`).
"""
