"""
Infrastructure Layer - External Systems Integration

Contains:
- http: runtime configuration shared by the HTTP clients
- sources: arXiv and OpenAlex adapters
"""
