"""Routeurs de l'API : assets des slots, limites, televersements, decouverte, publication."""
