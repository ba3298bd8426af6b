"""
Module d'authentification auprès du serveur de collecte

Échange unique des identifiants contre une identité (userId + jetons).
Tout échec est fatal : l'agent ne peut pas fonctionner sans identité.
"""

import requests

from .errors import AuthenticationError
from .models import Credentials, Identity


class AuthClient:
    """
    Client de connexion au serveur de collecte
    """

    def __init__(self, config, logger):
        """
        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
        """
        self.logger = logger.get_logger()

        server_config = config.get_server_config()
        self.login_url = server_config['login_url']
        self.timeout = server_config['timeout']
        self.verify_ssl = server_config['verify_ssl']

    def authenticate(self, credentials: Credentials) -> Identity:
        """
        Envoie les identifiants au point d'entrée de connexion

        Args:
            credentials: Identifiants saisis par l'utilisateur

        Returns:
            Identity: Identité renvoyée par le serveur

        Raises:
            AuthenticationError: Erreur réseau, statut différent de 200, réponse illisible
                ou réponse 200 sans userId
        """
        self.logger.info(f"Connexion au serveur: {self.login_url}")

        try:
            response = requests.post(
                url=self.login_url,
                json=credentials.to_dict(),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
                verify=self.verify_ssl
            )
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"login request failed: {e}") from e

        if response.status_code != 200:
            raise AuthenticationError(
                f"login failed with status code: {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
            if not isinstance(data, dict):
                raise TypeError(f"objet attendu, reçu {type(data).__name__}")
            identity = Identity.from_dict(data)
        except (ValueError, TypeError) as e:
            raise AuthenticationError(f"failed to decode login response: {e}") from e

        # Un 200 sans userId est refusé, chaque rapport serait sinon marqué ""
        if not identity.user_id:
            raise AuthenticationError("failed to decode login response: userId manquant")

        self.logger.info("Authentification réussie")
        return identity
