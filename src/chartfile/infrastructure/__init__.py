"""Infrastructure layer: local file access.

This layer depends on stdlib only. It must never import from domain,
fileformat, services, commands, or output. The service layer bridges
between the file format and the disk.
"""
