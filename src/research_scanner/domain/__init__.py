"""
Domain layer: immutable paper records and filter vocabularies.
"""
