"""Cloud Functions source entry point (deploy with --entry-point maps_proxy)."""

from adapters.cloud_function import maps_proxy

__all__ = ["maps_proxy"]
