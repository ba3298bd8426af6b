"""
Conversion d'unités et mise au format du rapport

Fonctions pures : une ressource brute de l'hôte devient une ressource
normalisée, sans effet de bord.
"""

from typing import Iterable, List

from ..core.models import (
    NormalizedResourceRecord,
    RawResourceRecord,
    REPORTED_TYPES,
)

# Diviseurs hérités du format de l'hôte : mem/maxmem divisés par 1024² donnent
# des GiB, disk/maxdisk divisés par 1024³ donnent des TiB.
MEMORY_DIVISOR = 1024 * 1024
DISK_DIVISOR = 1024 * 1024 * 1024


def round2(value: float) -> float:
    """
    Arrondit à deux décimales par formatage texte puis relecture

    Returns:
        float: La valeur telle qu'elle s'écrit avec deux décimales
    """
    return float(f"{value:.2f}")


def normalize(raw: RawResourceRecord, user_id: str) -> NormalizedResourceRecord:
    """
    Convertit une ressource brute au format du rapport

    Args:
        raw: Ressource rapportée par l'hôte
        user_id: Identifiant obtenu à la connexion

    Returns:
        NormalizedResourceRecord: Ressource avec mémoire en GiB et disque en TiB
    """
    return NormalizedResourceRecord(
        user_id=user_id,
        name=raw.name,
        vmid=raw.vmid,
        type=raw.type,
        status=raw.status,
        cpu=raw.cpu,
        maxcpu=raw.maxcpu,
        mem=round2(raw.mem / MEMORY_DIVISOR),
        maxmem=round2(raw.maxmem / MEMORY_DIVISOR),
        disk=round2(raw.disk / DISK_DIVISOR),
        maxdisk=round2(raw.maxdisk / DISK_DIVISOR),
    )


def is_reported(record) -> bool:
    """True si le type de la ressource (qemu ou lxc) doit être remonté"""
    return record.type in REPORTED_TYPES


def normalize_all(raws: Iterable[RawResourceRecord], user_id: str) -> List[NormalizedResourceRecord]:
    """Normalise puis filtre une liste de ressources en conservant leur ordre"""
    normalized = [normalize(raw, user_id) for raw in raws]
    return [record for record in normalized if is_reported(record)]
