"""Synthetic data, image IO, metrics and reporting helpers."""
