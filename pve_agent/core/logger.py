"""
Module de logging pour l'agent de remontée

Ce module fournit un système de logging centralisé avec :
- Rotation automatique des logs
- Différents niveaux de log
- Formatage cohérent
"""

import os
import sys
import logging
import logging.handlers

LOGGER_NAME = 'PveReportAgent'


class AgentLogger:
    """
    Gestionnaire de logging pour l'agent de remontée

    Cette classe configure et gère le système de logging pour l'ensemble
    de l'application, avec rotation automatique et formatage approprié.
    """

    def __init__(self, config):
        """
        Initialise le système de logging

        Args:
            config: Instance de AgentConfig pour récupérer les paramètres de log
        """
        self.config = config
        self.logger = logging.getLogger(LOGGER_NAME)

        # Éviter la duplication si déjà configuré
        if not self.logger.handlers:
            self._setup_logging()

    def _setup_logging(self):
        """
        Configure le système de logging avec les handlers appropriés

        Configure :
        - Le niveau de log basé sur la configuration
        - La rotation des fichiers de log
        - La sortie console
        """
        log_level_str = self.config.get('agent', 'log_level', 'INFO')
        log_file = self.config.get('logging', 'log_file')
        max_size = self.config.getint('logging', 'max_log_size', 10485760)  # 10MB
        backup_count = self.config.getint('logging', 'backup_count', 5)

        log_level = getattr(logging, log_level_str.upper(), logging.INFO)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Handler pour fichier avec rotation
        if log_file:
            try:
                log_dir = os.path.dirname(log_file)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=log_file,
                    maxBytes=max_size,
                    backupCount=backup_count,
                    encoding='utf-8'
                )
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            except OSError as e:
                print(f"Erreur lors de la configuration du logging fichier: {e}")

        # Handler pour la console
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
        self.logger.addHandler(console_handler)

        self.logger.info("Système de logging initialisé")
        self.logger.info(f"Niveau de log: {log_level_str}")
        self.logger.info(f"Fichier de log: {log_file}")

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def log_config_info(self, config):
        """
        Log les informations de configuration

        Args:
            config: Instance de AgentConfig
        """
        self.logger.info("=== Configuration de l'agent ===")

        for key, value in config.get_agent_config().items():
            self.logger.info(f"Agent.{key}: {value}")

        for key, value in config.get_server_config().items():
            self.logger.info(f"Server.{key}: {value}")

        self.logger.info("=== Fin configuration ===")

    def log_identity(self, identity):
        """
        Log l'identité obtenue à la connexion (jetons tronqués)

        Args:
            identity: Instance de Identity
        """
        token = identity.access_token
        token_preview = token[:8] + "..." if len(token) > 8 else "Non fourni"
        self.logger.info(f"Connecté en tant que: {identity.user_id}")
        self.logger.debug(f"Jeton d'accès: {token_preview}")

