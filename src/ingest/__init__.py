"""Raw batch ingestion.

This package reads raw humanitarian batches and runs source transformers.
It hands unified records to the store layer for partitioning.
"""
