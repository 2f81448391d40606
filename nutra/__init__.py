"""Backend package: DB models, query parsing, search pipelines, APIs.

This package turns free-text directory queries into SQL filters, runs them
against the companies table and serves the results over HTTP.
"""
