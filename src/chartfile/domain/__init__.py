"""Domain layer: chart entities, identifiers, versions and hierarchy rules.

This layer depends only on stdlib and pydantic.
It must never import from fileformat, services, commands, or config.
"""
