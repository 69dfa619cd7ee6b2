"""
Adapter for metrics library (Prometheus).
Keeps Prometheus-specific imports out of the service layer.
"""
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

# Store-level operation counter, labelled by operation and outcome
# (ok, not_found, invalid, error)
task_operations_total = Counter(
    'task_operations_total',
    'Total number of task store operations',
    ['operation', 'outcome']
)


def record_operation(operation: str, outcome: str) -> None:
    """Increment the task operation counter."""
    task_operations_total.labels(operation=operation, outcome=outcome).inc()


class MetricsAdapter:
    """Adapter for metrics operations."""

    def __init__(self):
        self.CONTENT_TYPE_LATEST = CONTENT_TYPE_LATEST

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return self.CONTENT_TYPE_LATEST

    def generate_metrics_response(self) -> str:
        """Generate metrics response in Prometheus text format."""
        return generate_latest().decode('utf-8')
