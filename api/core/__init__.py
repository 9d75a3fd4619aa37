"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses: settings, the error
taxonomy, the Postgres pool, the Mongo log sink, the SMTP mailer and the
application context that ties them together. Feature-specific SQL and
business logic live in the feature packages (e.g. `users/`).
"""
