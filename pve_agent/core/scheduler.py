"""
Module de planification pour l'agent de remontée

Ce module gère :
- L'interprétation de l'expression cron de planification
- L'exécution des cycles collecte/envoi en arrière-plan
- L'isolation des erreurs : un cycle en échec n'empêche pas les suivants
- Le démarrage et l'arrêt du scheduler
"""

import threading
from datetime import datetime
from typing import Callable, List, Optional

import schedule

from .errors import ConfigurationError

CRON_FIELDS = ('minute', 'hour', 'day_of_month', 'month', 'day_of_week')


def _parse_minute_value(value: str) -> int:
    try:
        minute = int(value)
    except ValueError:
        raise ConfigurationError(f"minute invalide: '{value}'")
    if not 0 <= minute <= 59:
        raise ConfigurationError(f"minute hors limites (0-59): {minute}")
    return minute


def _expand_minute_part(part: str) -> List[int]:
    """
    Développe un élément du champ minute (*, */N, A, A-B, A-B/N, A/N)
    """
    step = 1
    if '/' in part:
        part, step_str = part.split('/', 1)
        try:
            step = int(step_str)
        except ValueError:
            raise ConfigurationError(f"pas invalide: '{step_str}'")
        if step < 1:
            raise ConfigurationError(f"pas invalide: {step}")
        if part != '*' and '-' not in part:
            # "A/N" équivaut à "A-59/N"
            part = f"{part}-59"

    if part == '*':
        start, end = 0, 59
    elif '-' in part:
        start_str, end_str = part.split('-', 1)
        start, end = _parse_minute_value(start_str), _parse_minute_value(end_str)
        if start > end:
            raise ConfigurationError(f"intervalle invalide: '{part}'")
    else:
        start = end = _parse_minute_value(part)

    return list(range(start, end + 1, step))


def parse_cron_minutes(expression: str) -> List[int]:
    """
    Interprète une expression cron à cinq champs

    Seul le champ minute peut être restreint, les quatre autres doivent valoir
    '*' : la planification se traduit alors par des tâches horaires.

    Args:
        expression: Expression cron, par exemple "*/5 * * * *"

    Returns:
        list: Minutes de l'heure (triées, sans doublon) auxquelles déclencher un cycle

    Raises:
        ConfigurationError: Expression invalide ou non supportée
    """
    fields = (expression or '').split()
    if len(fields) != len(CRON_FIELDS):
        raise ConfigurationError(f"5 champs attendus dans '{expression}', {len(fields)} trouvé(s)")

    for name, value in zip(CRON_FIELDS[1:], fields[1:]):
        if value != '*':
            raise ConfigurationError(f"champ {name} non supporté: '{value}' (seul '*' est accepté)")

    minutes = set()
    for part in fields[0].split(','):
        if not part:
            raise ConfigurationError(f"champ minute invalide: '{fields[0]}'")
        minutes.update(_expand_minute_part(part))

    return sorted(minutes)


class ReportScheduler:
    """
    Gestionnaire de planification pour l'agent de remontée

    Cette classe utilise le module 'schedule' pour déclencher les cycles aux
    minutes désignées par l'expression cron, sur l'heure murale.
    """

    def __init__(self, config, logger, tick_callback: Callable[[], Optional[bool]]):
        """
        Initialise le scheduler

        Args:
            config: Instance de AgentConfig
            logger: Instance de AgentLogger
            tick_callback: Fonction exécutant un cycle; False ou une exception signale un échec
        """
        self.logger = logger.get_logger()
        self.tick_callback = tick_callback

        agent_config = config.get_agent_config()
        self.expression = agent_config['schedule']
        self.check_interval = agent_config['check_interval']

        # État du scheduler
        self.is_running = False
        self.scheduler_thread = None
        self.stop_event = threading.Event()

        # Statistiques des cycles
        self.ticks = 0
        self.failed_ticks = 0
        self.last_tick = None

        self._schedule = schedule.Scheduler()
        self.minutes = parse_cron_minutes(self.expression)
        self._setup_schedule()

        self.logger.info("ReportScheduler initialisé")

    def _setup_schedule(self):
        """
        Enregistre une tâche horaire par minute de déclenchement
        """
        self._schedule.clear()

        for minute in self.minutes:
            self._schedule.every().hour.at(f":{minute:02d}").do(self._scheduled_tick)

        self.logger.info(f"Planification configurée: '{self.expression}' "
                         f"({len(self.minutes)} déclenchement(s) par heure)")

    def _scheduled_tick(self):
        """
        Exécute un cycle en isolant ses erreurs

        Le cycle suivant reste planifié quelle que soit l'issue de celui-ci.
        """
        self.ticks += 1
        self.last_tick = datetime.now()
        self.logger.info(f"=== Cycle {self.ticks} déclenché ===")

        try:
            result = self.tick_callback()
        except Exception:
            self.failed_ticks += 1
            self.logger.exception("Erreur inattendue lors du cycle planifié")
            return

        if result is False:
            self.failed_ticks += 1
            self.logger.warning(f"Cycle {self.ticks} terminé en échec")
        else:
            self.logger.info(f"Cycle {self.ticks} terminé avec succès")

    @property
    def next_run(self) -> Optional[datetime]:
        return self._schedule.next_run

    def get_jobs(self) -> list:
        return self._schedule.get_jobs()

    def start(self):
        """
        Démarre le scheduler en arrière-plan

        Lance un thread séparé qui exécute la boucle de planification.
        """
        if self.is_running:
            self.logger.warning("Scheduler déjà en cours d'exécution")
            return

        self.logger.info("Démarrage du scheduler...")

        self.is_running = True
        self.stop_event.clear()

        self.scheduler_thread = threading.Thread(
            target=self._scheduler_loop,
            name="ReportScheduler",
            daemon=True
        )
        self.scheduler_thread.start()

        self.logger.info(f"Scheduler démarré, prochain cycle: {self.next_run}")

    def stop(self, timeout: float = 5):
        """
        Arrête le scheduler

        Un cycle en cours se termine avant l'arrêt effectif du thread.
        """
        if not self.is_running:
            self.logger.warning("Scheduler pas en cours d'exécution")
            return

        self.logger.info("Arrêt du scheduler...")

        self.is_running = False
        self.stop_event.set()

        if self.scheduler_thread and self.scheduler_thread.is_alive():
            self.scheduler_thread.join(timeout=timeout)

        self.logger.info("Scheduler arrêté")

    def _scheduler_loop(self):
        """
        Boucle principale du scheduler

        Vérifie toutes les `check_interval` secondes s'il faut lancer un cycle,
        jusqu'à ce que l'arrêt soit demandé.
        """
        self.logger.debug("Boucle du scheduler démarrée")

        while not self.stop_event.is_set():
            try:
                self._schedule.run_pending()
            except Exception:
                self.logger.exception("Erreur dans la boucle du scheduler")

            self.stop_event.wait(timeout=self.check_interval)

        self.logger.debug("Boucle du scheduler terminée")

    def run_now(self):
        """
        Exécute immédiatement un cycle, hors planification
        """
        self.logger.info("Cycle immédiat demandé")
        self._scheduled_tick()

    def get_status(self) -> dict:
        """
        Retourne le statut actuel du scheduler

        Returns:
            dict: Informations sur l'état du scheduler
        """
        next_run = self.next_run
        return {
            'is_running': self.is_running,
            'schedule': self.expression,
            'next_run': next_run.isoformat() if next_run else None,
            'next_run_in': str(next_run - datetime.now()) if next_run else None,
            'scheduled_jobs_count': len(self.get_jobs()),
            'ticks': self.ticks,
            'failed_ticks': self.failed_ticks,
            'last_tick': self.last_tick.isoformat() if self.last_tick else None
        }
