"""
Folio API.

FastAPI application serving localized content and translation endpoints.
"""
