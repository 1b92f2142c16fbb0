"""In-process behavioral monitoring: deviation scoring, mitigation policy, anomaly detection."""

from rampart_layers.in_process.anomaly_detection import AnomalyDetectionEngine
from rampart_layers.in_process.layer import InProcessLayer
from rampart_layers.in_process.mitigation import MitigationDecision, resolve

__all__ = ["AnomalyDetectionEngine", "InProcessLayer", "MitigationDecision", "resolve"]
