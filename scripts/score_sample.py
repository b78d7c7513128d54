import os
import json

import httpx

API = os.getenv("API_URL", "http://localhost:8080")

# First rows of the Pima Indians Diabetes dataset (outcome in the last column).
RECORDS = [
    ({"pregnancies": "6", "glucose": "148", "bloodPressure": "72", "skinThickness": "35",
      "insulin": "0", "bmi": "33.6", "diabetesPedigreeFunction": "0.627", "age": "50"}, 1),
    ({"pregnancies": "1", "glucose": "85", "bloodPressure": "66", "skinThickness": "29",
      "insulin": "0", "bmi": "26.6", "diabetesPedigreeFunction": "0.351", "age": "31"}, 0),
    ({"pregnancies": "8", "glucose": "183", "bloodPressure": "64", "skinThickness": "0",
      "insulin": "0", "bmi": "23.3", "diabetesPedigreeFunction": "0.672", "age": "32"}, 1),
    ({"pregnancies": "1", "glucose": "89", "bloodPressure": "66", "skinThickness": "23",
      "insulin": "94", "bmi": "28.1", "diabetesPedigreeFunction": "0.167", "age": "21"}, 0),
]

print(f"[score] posting {len(RECORDS)} records to {API}/v1/predict")
with httpx.Client(timeout=httpx.Timeout(connect=0.5, read=5.0, write=0.5, pool=0.5)) as client:
    for fields, expected in RECORDS:
        r = client.post(f"{API}/v1/predict", json=fields)
        r.raise_for_status()
        body = r.json()
        print(f"[score] expected={expected} got={json.dumps(body)}")
