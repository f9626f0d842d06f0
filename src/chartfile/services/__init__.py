"""Service layer: file-level operations returning ServiceResult.

Services may import from domain, fileformat, infrastructure and the
config section models. They must never import from commands or output.
"""
