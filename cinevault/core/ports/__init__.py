"""
Ports (interfaces abstraites) du domaine.

Les adaptateurs de l'infrastructure implementent ces interfaces ;
les services n'en connaissent que les contrats.
"""
