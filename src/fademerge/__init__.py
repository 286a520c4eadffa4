"""Fade merge service.

Fetches intro, main and outro segments, merges them with ffmpeg applying
fades and loudness normalisation, and publishes the result to an
S3-compatible object store.
"""
