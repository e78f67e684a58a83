"""FastAPI host adapter exposing the bundled pieces over HTTP."""
