"""
Point d'entrée principal du PVE Report Agent

Déroulement en mode service :
- Saisie des identifiants et connexion au serveur (une seule fois)
- Démarrage du planificateur de cycles collecte/envoi
- Attente jusqu'à l'arrêt du processus (signal ou Ctrl+C)
"""

import sys
import json
import signal
import getpass
import argparse
import threading
from functools import partial
from typing import Optional

from pve_agent.core.auth import AuthClient
from pve_agent.core.collector import ResourceCollector
from pve_agent.core.config import AgentConfig, create_default_config
from pve_agent.core.errors import AuthenticationError, CollectionError, DispatchError
from pve_agent.core.logger import AgentLogger
from pve_agent.core.models import Credentials, Identity
from pve_agent.core.scheduler import ReportScheduler
from pve_agent.core.sender import ReportSender


class PveReportAgent:
    """
    Agent de remontée principal

    Cette classe orchestre tous les composants de l'agent. L'identité obtenue
    à la connexion est passée explicitement au cycle planifié.
    """

    def __init__(self, config=None, source=None):
        """
        Initialise l'agent

        Args:
            config: Instance de AgentConfig ou chemin vers le fichier de configuration
            source: Source d'inventaire (par défaut la commande pvesh)
        """
        if not isinstance(config, AgentConfig):
            config = AgentConfig(config)
        self.config = config

        self.logger = AgentLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.auth_client = AuthClient(self.config, self.logger)
        self.collector = ResourceCollector(self.config, self.logger, source=source)
        self.sender = ReportSender(self.config, self.logger)
        self.scheduler = None

        # État de l'agent
        self.running = False
        self.shutdown_event = threading.Event()

        self.app_logger.info("PVE Report Agent initialisé")

    def authenticate(self, credentials: Credentials) -> Identity:
        """
        Se connecte au serveur de collecte

        Raises:
            AuthenticationError: Échec de la connexion, fatal pour l'agent
        """
        try:
            identity = self.auth_client.authenticate(credentials)
        except AuthenticationError as e:
            self.app_logger.critical(f"Erreur de connexion: {e}")
            raise

        self.logger.log_identity(identity)
        return identity

    def collect_and_send(self, identity: Identity) -> bool:
        """
        Effectue un cycle : collecte puis envoi

        Args:
            identity: Identité obtenue à la connexion

        Returns:
            bool: True si le lot a été envoyé
        """
        try:
            batch = self.collector.collect(identity.user_id)
        except CollectionError as e:
            self.app_logger.error(f"Erreur lors de la collecte des VM: {e}")
            return False

        try:
            self.sender.send(batch)
        except DispatchError as e:
            self.app_logger.error(f"Erreur lors de l'envoi des VM au serveur: {e}")
            return False

        return True

    def start_scheduler(self, identity: Identity):
        """
        Démarre le planificateur des cycles pour l'identité donnée
        """
        if self.scheduler:
            self.app_logger.warning("Le planificateur est déjà démarré")
            return

        self.scheduler = ReportScheduler(
            self.config,
            self.logger,
            partial(self.collect_and_send, identity)
        )
        self.scheduler.start()

    def stop_scheduler(self):
        if self.scheduler:
            self.scheduler.stop()
            self.scheduler = None

    def run_service_mode(self, credentials: Credentials) -> int:
        """
        Lance l'agent en mode service

        Returns:
            int: Code de sortie (1 si la connexion a échoué)
        """
        self.app_logger.info("Démarrage du PVE Report Agent en mode service")
        self.logger.log_config_info(self.config)

        try:
            identity = self.authenticate(credentials)
        except AuthenticationError:
            return 1

        try:
            self._setup_signal_handlers()
            self.start_scheduler(identity)
            self.running = True

            self.app_logger.info("Agent démarré, Ctrl+C pour arrêter")

            while self.running and not self.shutdown_event.is_set():
                self.shutdown_event.wait(timeout=1.0)

        except KeyboardInterrupt:
            self.app_logger.info("Interruption clavier détectée")
        finally:
            self.shutdown()

        return 0

    def collect_once(self, identity: Identity):
        """
        Effectue seulement une collecte, sans envoi

        Returns:
            ReportBatch: Lot collecté ou None en cas d'erreur
        """
        try:
            return self.collector.collect(identity.user_id)
        except CollectionError as e:
            self.app_logger.error(f"Erreur lors de la collecte des VM: {e}")
            return None

    def _setup_signal_handlers(self):
        """
        Configure les gestionnaires de signaux pour l'arrêt propre
        """
        def signal_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.app_logger.info(f"Signal {signal_name} reçu - Arrêt en cours...")
            self.shutdown_event.set()

        if threading.current_thread() is not threading.main_thread():
            return

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def shutdown(self):
        """
        Arrête proprement tous les composants de l'agent
        """
        self.running = False
        self.shutdown_event.set()

        if self.scheduler:
            self.stop_scheduler()
            self.app_logger.info("PVE Report Agent arrêté proprement")


def prompt_credentials() -> Credentials:
    """Demande les identifiants sur la console (mot de passe non affiché)"""
    identifier = input("Enter your ID: ").strip()
    secret = getpass.getpass("Enter your password: ")
    return Credentials(identifier=identifier, secret=secret)


def main(argv: Optional[list] = None) -> int:
    """
    Point d'entrée principal avec gestion des arguments de ligne de commande
    """
    parser = argparse.ArgumentParser(
        description="Agent de remontée Proxmox VE - Envoi périodique des VM et conteneurs"
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--mode', '-m',
        choices=['service', 'collect'],
        default='service',
        help="Mode de fonctionnement de l'agent"
    )

    parser.add_argument(
        '--create-config',
        action='store_true',
        help='Crée un fichier de configuration par défaut'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Valide la configuration actuelle'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Fichier de sortie pour le lot collecté (mode collect)'
    )

    args = parser.parse_args(argv)

    if args.create_config:
        config_path = args.config or input("Chemin du fichier de configuration à créer: ")
        try:
            create_default_config(config_path)
        except OSError as e:
            print(f"Erreur création configuration: {e}")
            return 1
        print(f"Configuration par défaut créée: {config_path}")
        return 0

    config = AgentConfig(args.config)
    errors = config.validate()
    for error in errors:
        print(f"Erreur de configuration: {error}")

    if args.validate_config:
        print("Configuration valide" if not errors else "Configuration invalide")
        return 0 if not errors else 1

    if errors:
        return 1

    agent = PveReportAgent(config)

    try:
        credentials = prompt_credentials()
    except (KeyboardInterrupt, EOFError):
        print("\nArrêt demandé par l'utilisateur")
        return 1

    if args.mode == 'service':
        return agent.run_service_mode(credentials)

    try:
        identity = agent.authenticate(credentials)
    except AuthenticationError:
        return 1

    batch = agent.collect_once(identity)
    if batch is None:
        return 1

    data = json.dumps(batch.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(data)
        except OSError as e:
            print(f"Erreur écriture du fichier de sortie: {e}")
            return 1
        print(f"Données sauvegardées dans: {args.output}")
    else:
        print(data)
    return 0


if __name__ == '__main__':
    sys.exit(main())
