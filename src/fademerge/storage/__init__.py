"""Object store publishing."""

from .publisher import Publisher, build_s3_client

__all__ = ["Publisher", "build_s3_client"]
