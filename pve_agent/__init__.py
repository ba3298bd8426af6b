"""
PVE Report Agent - Remontée périodique de l'inventaire Proxmox VE

Ce module principal fournit un agent qui collecte à intervalle régulier
les machines virtuelles (qemu) et conteneurs (lxc) de l'hôte, normalise
leurs unités et les envoie à un serveur de collecte central.

Author: PVE Report Agent Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "PVE Report Agent Team"

# Imports principaux pour faciliter l'utilisation
from .core.collector import ResourceCollector
from .core.config import AgentConfig
from .core.logger import AgentLogger

__all__ = ['ResourceCollector', 'AgentConfig', 'AgentLogger']
