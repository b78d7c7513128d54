"""Diabetes risk inference: schema validation, ONNX session lifecycle and prediction service."""
