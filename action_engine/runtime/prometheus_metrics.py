from __future__ import annotations

import json
import logging
import os
from collections import Counter
from typing import Iterable

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

LOGGER = logging.getLogger(__name__)


class BatchMetricsClient:
    """Best-effort Prometheus Pushgateway client for batch runs.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.
      Example: http://pushgateway.monitoring.svc.cluster.local:9091

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.
      Example: {"instance": "executor-0"}

    Metrics delivery is a side-effect: failures are logged and never fail
    the batch.
    """

    def __init__(self, *, job: str = "action_engine") -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._job = job

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    @staticmethod
    def build_registry(
        *,
        batch_id: str,
        group_status: str,
        ticks: int,
        duration_seconds: float,
        action_statuses: Iterable[str],
    ) -> CollectorRegistry:
        """Build a fresh registry describing one finished batch."""
        registry = CollectorRegistry()

        Gauge(
            "action_batch_ticks",
            "Polling ticks run by the batch",
            labelnames=["batch_id", "group_status"],
            registry=registry,
        ).labels(batch_id=batch_id, group_status=group_status).set(ticks)

        Gauge(
            "action_batch_duration_seconds",
            "Wall time of the batch run",
            labelnames=["batch_id", "group_status"],
            registry=registry,
        ).labels(batch_id=batch_id, group_status=group_status).set(duration_seconds)

        actions = Gauge(
            "action_batch_actions",
            "Actions per final status",
            labelnames=["batch_id", "action_status"],
            registry=registry,
        )
        for status, count in Counter(action_statuses).items():
            actions.labels(batch_id=batch_id, action_status=status).set(count)

        return registry

    def push_batch(
        self,
        *,
        batch_id: str,
        group_status: str,
        ticks: int,
        duration_seconds: float,
        action_statuses: Iterable[str],
    ) -> None:
        if not self._pushgateway_url:
            return

        registry = self.build_registry(
            batch_id=batch_id,
            group_status=group_status,
            ticks=ticks,
            duration_seconds=duration_seconds,
            action_statuses=action_statuses,
        )
        try:
            push_to_gateway(
                gateway=self._pushgateway_url,
                job=self._job,
                registry=registry,
                grouping_key=self._grouping_key,
            )
        except OSError:
            LOGGER.warning("Prometheus push failed", exc_info=True, extra={"job": self._job})
            return

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": self._job, "grouping_key": self._grouping_key},
        )
