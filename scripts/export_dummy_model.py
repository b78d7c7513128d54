"""
Export a stand-in diabetes classifier to ONNX.

The graph matches the production artifact's contract: eight named float32
inputs of shape [1, 1] in schema order and one output holding the class (0/1).
Weights are fixed logistic-regression coefficients for the Pima dataset, so
the exported file is deterministic.
"""
import os
from pathlib import Path

import torch
import torch.nn as nn

from diabetes_risk.schemas import specs

ROOT = Path(__file__).resolve().parents[1]

INPUT_NAMES = [s.name for s in specs()]

COEFS = [0.123, 0.0352, -0.0133, 0.0006, -0.0012, 0.0897, 0.945, 0.0149]
INTERCEPT = -8.40


class PimaLogit(nn.Module):
    def __init__(self):
        super().__init__()
        self.lin = nn.Linear(len(INPUT_NAMES), 1)
        with torch.no_grad():
            self.lin.weight.copy_(torch.tensor([COEFS]))
            self.lin.bias.fill_(INTERCEPT)

    def forward(self, *features):
        x = torch.cat(features, dim=-1)
        prob = torch.sigmoid(self.lin(x))
        return (prob > 0.5).to(torch.float32)


out_path = ROOT / os.getenv("MODEL_PATH", "models/diabetes_model.onnx")
out_path.parent.mkdir(parents=True, exist_ok=True)

model = PimaLogit().eval()
dummy = tuple(torch.zeros(1, 1) for _ in INPUT_NAMES)

torch.onnx.export(
    model, dummy, out_path.as_posix(),
    input_names=INPUT_NAMES, output_names=["label"],
    opset_version=13,
)
print(f"Wrote {out_path}")
