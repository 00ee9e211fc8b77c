"""Shared lookup models and the lookup resolver."""
