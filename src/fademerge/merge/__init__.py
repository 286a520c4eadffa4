"""Merge pipeline: request validation, orchestration and HTTP route."""
