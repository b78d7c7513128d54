from prometheus_client import Counter, Histogram

PREDICTIONS = Counter("predictions_total", "Prediction requests by outcome", ["outcome"])
FAILURES = Counter("prediction_failures_total", "Inference failures by reason", ["reason"])
LOAD_ATTEMPTS = Counter("model_load_attempts_total", "Model artifact load attempts", ["result"])
OUTPUT_ANOMALIES = Counter("model_output_anomalies_total",
                           "Model outputs that were not exactly 0 or 1")
E2E = Histogram("e2e_latency_ms", "End-to-end prediction latency (ms)",
                buckets=(1, 2, 3, 5, 8, 13, 21, 34, 55, 89))
INF = Histogram("inference_latency_ms", "Inference latency (ms)",
                buckets=(1, 2, 3, 5, 8, 13, 21, 34))
