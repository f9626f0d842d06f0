"""The .ownchart file format: six-layer load pipeline and the writer.

Layer 1: Pre-parse checks (size, extension)       -> structure.py
Layer 2: Safe JSON parsing (pollution keys)       -> structure.py
Layer 3: Structure (required fields, types)       -> structure.py
Layer 4: Semantics (IDs, dates, hierarchy, deps)  -> semantics.py
Layer 5: Sanitization (markup in text fields)     -> sanitize.py
Layer 6: Migration (older format versions)        -> migrate.py

``deserialize`` runs the layers and builds domain state; ``serialize``
writes domain state back out. Layers may import from the domain layer
and the result contract in ``services.result``, never from other services,
commands, or config.
"""
