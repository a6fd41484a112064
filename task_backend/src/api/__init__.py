"""
FastAPI task tracker backend package.

The application instance lives in ``src.api.main`` (``from src.api.main import app``);
it is not imported here so that the storage, schema and client modules can be
used without configuring the web app.
"""
