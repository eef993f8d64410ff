"""Shared configuration, Redis and schema helpers."""
