"""Shared test doubles and document schemas."""
