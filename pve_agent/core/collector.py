"""
Module collecteur principal pour l'agent de remontée

Ce module orchestre une collecte :
- Interrogation de la source d'inventaire
- Normalisation des unités
- Filtrage des types remontés (qemu, lxc)
- Assemblage du lot pour l'envoi
"""

import time
from typing import Any, Dict, Optional

from ..collectors.base import ResourceSource
from ..collectors.mapper import normalize_all
from ..collectors.pvesh import PveshResourceSource
from .errors import CollectionError
from .models import ReportBatch


class ResourceCollector:
    """
    Collecteur principal qui construit un lot de ressources normalisées

    Aucun état n'est conservé d'une collecte à l'autre : chaque appel à
    collect() interroge la source et construit un lot neuf.
    """

    def __init__(self, config, logger, source: Optional[ResourceSource] = None):
        """
        Initialise le collecteur principal

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
            source: Source d'inventaire (par défaut la commande pvesh configurée)
        """
        self.config = config
        self.logger = logger.get_logger()

        if source is None:
            agent_config = config.get_agent_config()
            source = PveshResourceSource(
                self.logger,
                command=agent_config['inventory_command'],
                timeout=agent_config['command_timeout']
            )
        self.source = source

        # Statistiques de collecte
        self.collections = 0
        self.collection_errors = 0
        self.last_collection_duration = None
        self.last_record_count = None

        self.logger.info(f"ResourceCollector initialisé (source: {self.source.source_name})")

    def collect(self, user_id: str) -> ReportBatch:
        """
        Lance une collecte complète

        Args:
            user_id: Identifiant utilisé pour marquer chaque ressource

        Returns:
            ReportBatch: Lot de ressources qemu/lxc dans l'ordre de l'inventaire

        Raises:
            CollectionError: Commande d'inventaire en échec ou sortie illisible
        """
        start_time = time.time()
        self.collections += 1
        self.logger.debug("Début de collecte des ressources")

        try:
            raws = self.source.list_resources()
        except CollectionError:
            self.collection_errors += 1
            raise

        records = normalize_all(raws, user_id)
        batch = ReportBatch(user_id=user_id, records=records)

        self.last_collection_duration = round(time.time() - start_time, 2)
        self.last_record_count = len(batch)
        self.logger.info(f"Collecte terminée en {self.last_collection_duration:.2f} secondes: "
                         f"{len(batch)} ressource(s) retenue(s) sur {len(raws)}")
        return batch

    def get_collection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de collecte

        Returns:
            dict: Statistiques du collecteur
        """
        return {
            'source': self.source.source_name,
            'collections': self.collections,
            'errors_count': self.collection_errors,
            'last_collection_duration': self.last_collection_duration,
            'last_record_count': self.last_record_count
        }
