"""Cosmic-ray detection, removal and enhancement stages."""
