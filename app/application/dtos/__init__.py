"""Application DTOs: frozen read-models returned by repositories and services."""
