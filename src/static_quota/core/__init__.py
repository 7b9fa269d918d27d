"""Core domain for static_quota: domain models, ports, and services."""
