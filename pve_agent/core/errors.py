"""
Hiérarchie des erreurs de l'agent

- AuthenticationError : fatale au démarrage, l'agent ne peut pas tourner sans identité
- CollectionError : interrompt le cycle en cours uniquement
- DispatchError : le lot est abandonné, le cycle suivant n'est pas affecté
"""

from typing import Optional


class AgentError(Exception):
    """Erreur de base de l'agent"""


class ConfigurationError(AgentError):
    """Configuration invalide (URL, expression cron, ...)"""


class AuthenticationError(AgentError):
    """Échec de l'échange d'identifiants avec le serveur"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CollectionError(AgentError):
    """
    Échec de la collecte d'inventaire

    Le message vaut "command execution failed" ou "parse failure",
    la cause sous-jacente est conservée dans `cause`.
    """

    COMMAND_FAILED = "command execution failed"
    PARSE_FAILURE = "parse failure"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.args[0]}: {self.cause}"
        return self.args[0]


class DispatchError(AgentError):
    """Échec de l'envoi d'un lot au serveur (transport ou statut HTTP)"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause
