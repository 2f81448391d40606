"""Pipelines for query normalization, search, company lookups and dataset ingest.

Each step is callable on its own so the API and the init_db script can share
them.
"""
