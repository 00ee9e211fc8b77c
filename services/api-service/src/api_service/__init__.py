"""HTTP service exposing the enrollment lookup tables."""
