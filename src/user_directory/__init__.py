"""Cached, queryable view over a remote user collection."""
