"""Partitioned corpus storage.

This package writes category partition sets and their indexes.
It powers chunked reads, the manifest, and search for the SDK.
"""
