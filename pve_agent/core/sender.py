"""
Module de communication avec le serveur pour l'agent de remontée

Ce module gère :
- L'envoi des lots de ressources au serveur central
- L'interprétation du statut HTTP
- Les statistiques d'envoi

Un lot en échec n'est ni réessayé ni conservé.
"""

import json
from datetime import datetime
from typing import Dict, Any

import requests
import urllib3

from .. import __version__
from .errors import DispatchError
from .models import ReportBatch


class ReportSender:
    """
    Gestionnaire de communication avec le serveur central
    """

    def __init__(self, config, logger):
        """
        Initialise le sender avec la configuration

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
        """
        self.logger = logger.get_logger()

        server_config = config.get_server_config()
        self.report_url = server_config['report_url']
        self.timeout = server_config['timeout']
        self.verify_ssl = server_config['verify_ssl']

        if not self.verify_ssl:
            # Désactiver les warnings SSL si la vérification est désactivée
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        # Statistiques de communication
        self.last_successful_send = None
        self.send_attempts = 0
        self.send_failures = 0

        self.logger.info(f"ReportSender initialisé (URL: {self.report_url})")

    def send(self, batch: ReportBatch):
        """
        Envoie un lot de ressources au serveur

        Args:
            batch: Lot construit par le collecteur

        Raises:
            DispatchError: Erreur réseau ou statut HTTP différent de 200
        """
        self.send_attempts += 1

        headers = {
            'Content-Type': 'application/json',
            'User-Agent': f'PveReportAgent/{__version__}'
        }
        payload = batch.to_dict()

        self.logger.debug(f"Taille des données: {len(json.dumps(payload))} bytes")

        try:
            response = requests.post(
                url=self.report_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl
            )

        except requests.exceptions.Timeout as e:
            self.send_failures += 1
            raise DispatchError(f"Timeout lors de l'envoi (>{self.timeout}s)", cause=e) from e

        except requests.exceptions.RequestException as e:
            self.send_failures += 1
            raise DispatchError(f"Erreur de connexion: {e}", cause=e) from e

        if response.status_code != 200:
            self.send_failures += 1
            raise DispatchError(
                f"received non-OK response: HTTP {response.status_code} {response.text[:200]}",
                status_code=response.status_code
            )

        self.last_successful_send = datetime.now()
        self.logger.info(f"Lot envoyé avec succès ({len(batch)} ressource(s))")

    def get_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de communication

        Returns:
            dict: Statistiques d'envoi
        """
        return {
            'last_successful_send': self.last_successful_send.isoformat() if self.last_successful_send else None,
            'total_attempts': self.send_attempts,
            'total_failures': self.send_failures,
            'success_rate': ((self.send_attempts - self.send_failures) / self.send_attempts * 100) if self.send_attempts > 0 else 0,
            'report_url': self.report_url
        }
