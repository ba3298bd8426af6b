"""
Module Core - Composants principaux de l'agent de remontée

Ce module contient les fonctionnalités de base de l'agent :
- Configuration
- Logging
- Authentification auprès du serveur
- Collecte des ressources
- Planification des envois
- Communication avec le serveur
"""
