"""
Module Collectors - Sources d'inventaire et normalisation des ressources
"""
