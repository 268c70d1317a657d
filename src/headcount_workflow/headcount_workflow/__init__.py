"""Headcount Workflow package.

This package is organized by feature modules (headcount, governance, positions, ...)
with a thin Flask controller layer and service/repository layers over a generic
record store.
"""
