"""Startup prefetch: download the configured reference data files.

Runs once before the server accepts connections; see `prefetch.pipeline.run`.
"""
