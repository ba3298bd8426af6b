"""
Module de configuration pour l'agent de remontée

Ce module gère la configuration de l'agent, incluant :
- Lecture du fichier de configuration INI
- Surcharge par l'environnement (SERVER_URL, fichier .env)
- Validation des paramètres
- Valeurs par défaut
"""

import os
import configparser
from typing import Dict, Any, List, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError
from .scheduler import parse_cron_minutes

DEFAULT_CONFIG_PATH = "/etc/pve-report-agent/config.ini"
DEFAULT_LOG_PATH = "/var/log/pve-report-agent/agent.log"

LOGIN_PATH = "/api/user/login"
REPORT_PATH = "/api/vm/list"

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class AgentConfig:
    """
    Gestionnaire de configuration pour l'agent de remontée

    Cette classe centralise la gestion de toute la configuration de l'agent,
    incluant les paramètres serveur, planification et logging.
    """

    def __init__(self, config_file: Optional[str] = None, load_env: bool = True):
        """
        Initialise la configuration de l'agent

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
            load_env: Lit le fichier .env et applique les variables d'environnement
        """
        self.config = configparser.ConfigParser(interpolation=None)
        self.config_file = config_file or DEFAULT_CONFIG_PATH

        # Définir les valeurs par défaut
        self._set_defaults()

        # Charger la configuration depuis le fichier
        self._load_config()

        if load_env:
            self._load_environment()

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Ces valeurs sont utilisées si aucun fichier de configuration n'est trouvé
        ou si certaines sections/clés sont manquantes.
        """
        # Configuration serveur
        self.config.add_section('server')
        self.config.set('server', 'url', 'http://localhost:8080')
        self.config.set('server', 'timeout', '10')
        self.config.set('server', 'verify_ssl', 'true')

        # Configuration agent
        self.config.add_section('agent')
        self.config.set('agent', 'schedule', '*/5 * * * *')
        self.config.set('agent', 'check_interval', '1')
        self.config.set('agent', 'log_level', 'INFO')
        self.config.set('agent', 'inventory_command', 'pvesh get /cluster/resources --output-format json')
        self.config.set('agent', 'command_timeout', '30')

        # Configuration logging
        self.config.add_section('logging')
        self.config.set('logging', 'log_file', DEFAULT_LOG_PATH)
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        """
        if os.path.exists(self.config_file):
            try:
                self.config.read(self.config_file, encoding='utf-8')
                print(f"Configuration chargée depuis: {self.config_file}")
            except configparser.Error as e:
                print(f"Erreur lors du chargement de la configuration: {e}")
                print("Utilisation des valeurs par défaut")
        else:
            print(f"Fichier de configuration non trouvé: {self.config_file}")
            print("Utilisation des valeurs par défaut")

    def _load_environment(self):
        """
        Applique les variables d'environnement (et le fichier .env s'il existe)

        SERVER_URL a priorité sur la clé [server] url du fichier.
        """
        load_dotenv(find_dotenv(usecwd=True))

        server_url = os.environ.get('SERVER_URL')
        if server_url:
            self.config.set('server', 'url', server_url)

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        return self.config.getint(section, option, fallback=fallback)

    def getfloat(self, section: str, option: str, fallback: float = 0.0) -> float:
        return self.config.getfloat(section, option, fallback=fallback)

    def set(self, section: str, option: str, value: str):
        """
        Définit une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            value: Nouvelle valeur
        """
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        config_dir = os.path.dirname(self.config_file)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            self.config.write(f)

        print(f"Configuration sauvegardée dans: {self.config_file}")

    @property
    def server_url(self) -> str:
        return (self.get('server', 'url') or '').rstrip('/')

    @property
    def login_url(self) -> str:
        """URL du point d'entrée de connexion"""
        return self.server_url + LOGIN_PATH

    @property
    def report_url(self) -> str:
        """URL du point d'entrée de réception des listes de VM"""
        return self.server_url + REPORT_PATH

    def get_server_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète du serveur

        Returns:
            dict: Configuration serveur
        """
        return {
            'url': self.server_url,
            'login_url': self.login_url,
            'report_url': self.report_url,
            'timeout': self.getfloat('server', 'timeout', 10.0),
            'verify_ssl': self.getboolean('server', 'verify_ssl', True)
        }

    def get_agent_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète de l'agent

        Returns:
            dict: Configuration agent
        """
        return {
            'schedule': self.get('agent', 'schedule', '*/5 * * * *'),
            'check_interval': self.getfloat('agent', 'check_interval', 1.0),
            'log_level': self.get('agent', 'log_level', 'INFO'),
            'inventory_command': self.get('agent', 'inventory_command'),
            'command_timeout': self.getfloat('agent', 'command_timeout', 30.0)
        }

    def validate(self) -> List[str]:
        """
        Valide la configuration courante

        Returns:
            list: Messages d'erreur, vide si la configuration est valide
        """
        errors = []

        # Valider l'URL du serveur
        server_url = self.server_url
        if not server_url or not server_url.startswith(('http://', 'https://')):
            errors.append("URL serveur invalide")

        # Valider les délais
        for section, option in (('server', 'timeout'), ('agent', 'check_interval'),
                                ('agent', 'command_timeout')):
            try:
                if self.getfloat(section, option) <= 0:
                    errors.append(f"{section}.{option} doit être strictement positif")
            except ValueError:
                errors.append(f"{section}.{option} n'est pas un nombre")

        # Valider les paramètres de rotation des logs
        for option in ('max_log_size', 'backup_count'):
            try:
                if self.getint('logging', option) < 0:
                    errors.append(f"logging.{option} doit être positif ou nul")
            except ValueError:
                errors.append(f"logging.{option} n'est pas un entier")

        try:
            self.getboolean('server', 'verify_ssl')
        except ValueError:
            errors.append("server.verify_ssl n'est pas un booléen")

        # Valider le niveau de log
        log_level = (self.get('agent', 'log_level') or '').upper()
        if log_level not in LOG_LEVELS:
            errors.append("Niveau de log invalide")

        # Valider l'expression de planification
        try:
            parse_cron_minutes(self.get('agent', 'schedule', ''))
        except ConfigurationError as e:
            errors.append(f"Planification invalide: {e}")

        return errors


# Fonction utilitaire pour créer une configuration par défaut
def create_default_config(config_path: str) -> AgentConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        AgentConfig: Instance de configuration créée
    """
    config = AgentConfig(config_path, load_env=False)
    config.save()
    return config
