"""Observability for mockgen rendering runs."""
