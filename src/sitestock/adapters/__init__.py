"""Adapters connecting the domain to storage, HTTP and file formats."""
