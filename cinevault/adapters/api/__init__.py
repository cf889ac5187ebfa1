"""Adaptateurs reseau : telechargement des assets fournisseurs."""
