"""
Classe de base pour les sources d'inventaire de l'agent

Une source sait lister les ressources de l'hôte. Le collecteur ne dépend
que de cette interface, ce qui permet de substituer une source factice
à la commande système dans les tests.
"""

import time
from abc import ABC, abstractmethod
from typing import List

from ..core.models import RawResourceRecord


class ResourceSource(ABC):
    """
    Classe de base abstraite pour toutes les sources d'inventaire
    """

    def __init__(self, logger):
        """
        Initialise la source

        Args:
            logger: Logger standard (logging.Logger)
        """
        self.logger = logger

        # Métadonnées de la source
        self.source_name = self.__class__.__name__
        self.collection_start_time = None

    @abstractmethod
    def list_resources(self) -> List[RawResourceRecord]:
        """
        Liste les ressources de l'hôte, dans l'ordre rapporté

        Returns:
            List[RawResourceRecord]: Ressources brutes

        Raises:
            CollectionError: Commande en échec ou sortie illisible
        """

    def _start_collection(self):
        self.collection_start_time = time.time()
        self.logger.debug(f"Début collecte {self.source_name}")

    def _end_collection(self) -> float:
        """
        Termine une session de collecte

        Returns:
            float: Durée de collecte en secondes
        """
        if self.collection_start_time:
            duration = time.time() - self.collection_start_time
            self.logger.debug(f"Collecte {self.source_name} terminée en {duration:.2f}s")
            return duration
        return 0.0

