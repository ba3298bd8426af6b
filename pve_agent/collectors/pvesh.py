"""
Source d'inventaire basée sur la commande pvesh de Proxmox VE

La commande `pvesh get /cluster/resources --output-format json` renvoie un
tableau JSON de ressources (VM, conteneurs, nœuds, stockages...).
"""

import json
import shlex
import subprocess
from typing import List, Sequence, Union

from .base import ResourceSource
from ..core.errors import CollectionError
from ..core.models import RawResourceRecord

DEFAULT_INVENTORY_COMMAND = "pvesh get /cluster/resources --output-format json"


class PveshResourceSource(ResourceSource):
    """
    Exécute la commande d'inventaire et décode sa sortie standard
    """

    def __init__(self, logger, command: Union[str, Sequence[str]] = DEFAULT_INVENTORY_COMMAND,
                 timeout: float = 30):
        """
        Args:
            logger: Logger standard
            command: Commande d'inventaire (chaîne ou liste d'arguments)
            timeout: Durée maximale d'exécution de la commande en secondes
        """
        super().__init__(logger)
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.timeout = timeout

    def list_resources(self) -> List[RawResourceRecord]:
        self._start_collection()
        try:
            output = self._run_command()
            return self.parse_output(output)
        finally:
            self._end_collection()

    def _run_command(self) -> str:
        """
        Exécute la commande d'inventaire

        Returns:
            str: Sortie standard de la commande

        Raises:
            CollectionError: Commande introuvable, en timeout ou code retour non nul
        """
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise CollectionError(CollectionError.COMMAND_FAILED, e) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            self.logger.warning(f"Commande échouée: {' '.join(self.command)} "
                                f"(code: {result.returncode}) {stderr[:200]}")
            cause = subprocess.CalledProcessError(result.returncode, self.command,
                                                  result.stdout, result.stderr)
            raise CollectionError(CollectionError.COMMAND_FAILED, cause)

        return result.stdout

    @staticmethod
    def parse_output(output: str) -> List[RawResourceRecord]:
        """
        Décode la sortie JSON de l'inventaire

        Args:
            output: Texte JSON (tableau d'objets)

        Returns:
            List[RawResourceRecord]: Ressources dans l'ordre de la sortie

        Raises:
            CollectionError: Sortie qui n'est pas un tableau de ressources valides
        """
        try:
            data = json.loads(output)
            if not isinstance(data, list):
                raise TypeError(f"tableau attendu, reçu {type(data).__name__}")
            return [RawResourceRecord.from_dict(item) for item in data]
        except (ValueError, TypeError) as e:
            raise CollectionError(CollectionError.PARSE_FAILURE, e) from e
