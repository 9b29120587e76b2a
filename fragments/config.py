"""Configuration settings for the fragments service."""

import os


FRAGMENTS_HOST = os.environ.get("FRAGMENTS_HOST", "0.0.0.0")

FRAGMENTS_PORT = int(os.environ.get("FRAGMENTS_PORT", "8080"))

STORAGE_BACKEND = os.environ.get("FRAGMENTS_STORAGE_BACKEND", "memory").lower()

DATABASE_PATH = os.environ.get("FRAGMENTS_DATABASE_PATH", "./data/fragments.db")

BLOB_STORAGE_PATH = os.environ.get("FRAGMENTS_BLOB_PATH", "./data/blobs")

HTPASSWD_FILE = os.environ.get("HTPASSWD_FILE")

API_URL = os.environ.get("API_URL")

SWEEP_INTERVAL_SECONDS = int(os.environ.get("FRAGMENTS_SWEEP_INTERVAL", "3600"))

SERVICE_VERSION = "0.1.0"
