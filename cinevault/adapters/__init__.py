"""Adaptateurs : implementations concretes des ports (reseau, lecture media)."""
