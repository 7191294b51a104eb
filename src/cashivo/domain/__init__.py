"""Domain layer for cashivo application.

Services are imported from their modules (e.g. ``cashivo.domain.recurring``);
this package does not re-export them because the database layer imports
``cashivo.domain.entities`` during its own initialization.
"""
