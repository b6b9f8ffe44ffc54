"""Display strings for the status page, keyed by resource name."""

from typing import Dict

STRINGS: Dict[str, str] = {
    "Metrics_Servers": "Servers",
    "Metrics_Retries": "Retries",
    "Metrics_FailedJobs": "Failed",
    "Metrics_ProcessingJobs": "Processing",
    "Metrics_SucceededJobs": "Succeeded",
    "Metrics_FailedCountOrNull": "{0} failed job(s) found. Retry or delete them manually.",
    "Metrics_NoActiveServers": "No active servers found. Jobs will not be processed.",
}


def get_string(key: str) -> str:
    return STRINGS.get(key, key)
