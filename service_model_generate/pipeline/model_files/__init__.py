"""
Generators of the model package files and of the client package files
that are not produced through a client delegate.
"""
