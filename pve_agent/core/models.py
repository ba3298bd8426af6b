"""
Modèles de données échangés entre les composants de l'agent

Les noms de champs JSON suivent le format attendu par le serveur de collecte
(userId, vmid, maxcpu, ...), les attributs Python restent en snake_case.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

# Types de ressources remontés au serveur
QEMU = "qemu"
LXC = "lxc"
REPORTED_TYPES = (QEMU, LXC)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"chaîne attendue, reçu {type(value).__name__}")
    return value


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"entier attendu, reçu {type(value).__name__}")
    return value


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"nombre attendu, reçu {type(value).__name__}")
    return float(value)


@dataclass(frozen=True)
class Credentials:
    """Identifiants saisis au démarrage, utilisés une seule fois"""
    identifier: str
    secret: str = field(repr=False)

    def to_dict(self) -> Dict[str, str]:
        return {'userId': self.identifier, 'password': self.secret}


@dataclass(frozen=True)
class Identity:
    """Identité obtenue après connexion, valable pour toute la durée du processus"""
    user_id: str
    access_token: str = field(default="", repr=False)
    refresh_token: str = field(default="", repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        return cls(
            user_id=_as_str(data.get('userId')),
            access_token=_as_str(data.get('accessToken')),
            refresh_token=_as_str(data.get('refreshToken')),
        )


@dataclass(frozen=True)
class RawResourceRecord:
    """
    Ressource telle que rapportée par l'hôte

    mem/maxmem et disk/maxdisk sont conservés tels quels, la conversion
    d'unités est faite par le mapper.
    """
    name: str
    vmid: int
    type: str
    status: str
    cpu: float
    maxcpu: int
    mem: float
    maxmem: float
    disk: float
    maxdisk: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawResourceRecord":
        """
        Construit un enregistrement depuis un objet JSON de l'inventaire

        Les champs absents prennent leur valeur nulle (les nœuds et stockages
        n'ont pas de vmid par exemple). Un champ de mauvais type lève TypeError.
        """
        if not isinstance(data, dict):
            raise TypeError(f"objet attendu, reçu {type(data).__name__}")

        return cls(
            name=_as_str(data.get('name')),
            vmid=_as_int(data.get('vmid')),
            type=_as_str(data.get('type')),
            status=_as_str(data.get('status')),
            cpu=_as_float(data.get('cpu')),
            maxcpu=_as_int(data.get('maxcpu')),
            mem=_as_float(data.get('mem')),
            maxmem=_as_float(data.get('maxmem')),
            disk=_as_float(data.get('disk')),
            maxdisk=_as_float(data.get('maxdisk')),
        )


@dataclass(frozen=True)
class NormalizedResourceRecord:
    """Ressource au format du rapport (mémoire en GiB, disque en TiB)"""
    user_id: str
    name: str
    vmid: int
    type: str
    status: str
    cpu: float
    maxcpu: int
    mem: float
    maxmem: float
    disk: float
    maxdisk: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'name': self.name,
            'vmid': self.vmid,
            'type': self.type,
            'status': self.status,
            'cpu': self.cpu,
            'maxcpu': self.maxcpu,
            'mem': self.mem,
            'maxmem': self.maxmem,
            'disk': self.disk,
            'maxdisk': self.maxdisk,
        }


@dataclass(frozen=True)
class ReportBatch:
    """Lot envoyé au serveur lors d'un cycle"""
    user_id: str
    records: List[NormalizedResourceRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'vms': [record.to_dict() for record in self.records],
        }

    def __len__(self) -> int:
        return len(self.records)
