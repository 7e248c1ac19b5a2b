"""Design-to-Sitecore conversion package.

Subpackages:
- integrations: External service clients (Figma REST API, OpenAI)
- nodes: Pure helpers for design trees, Figma keys and model output cleanup
"""
