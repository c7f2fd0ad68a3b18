"""
Serving — FastAPI application exposing search and the Drive webhook.
"""
