"""
Smoke test: POST /analyze against a running server with a real Gemini key.

Run with the API server already running:
    uvicorn scamguard.main:app --reload

Then in another terminal:
    python test.py
"""

import sys

import requests

BASE = "http://127.0.0.1:8000"

CASES = [
    ("text", "URGENT: Your account has been suspended. Buy a $500 gift card and send us the code to restore access."),
    ("link", "https://www.irs.gov"),
]


def run_case(mode: str, payload: str) -> None:
    print(f"POST /analyze ({mode}) ...")
    r = requests.post(f"{BASE}/analyze", json={"input": payload, "mode": mode}, timeout=120)

    if r.status_code != 200:
        print(f"FAIL  status={r.status_code}")
        print(r.text)
        sys.exit(1)

    data = r.json()
    print(f"OK    risk_score = {data.get('risk_score')}")
    print(f"      scam_type  = {data.get('scam_type')!r}")
    print(f"      red_flags  = {data.get('red_flags')}")
    print(f"      advice     = {str(data.get('advice', ''))[:120]!r} ...")
    for source in data.get("sources", []):
        print(f"      source     = {source['title']} -> {source['uri']}")


if __name__ == "__main__":
    for mode, payload in CASES:
        run_case(mode, payload)
